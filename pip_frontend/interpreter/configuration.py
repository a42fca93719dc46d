"""Interpreter configuration for pip-frontend.

Describes the Python installation that pip operates on, and probes an
interpreter executable to build that description.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from ..errors import NotRunnableError

logger = logging.getLogger(__name__)

# Last version whose pip cannot use SSL
INSECURE_VERSION_LIMIT = (2, 5)

PROBE_TIMEOUT = 10

# Prints prefix, library directory and version, one per line.
# Kept Python 2 compatible so old interpreters can be probed.
_PROBE_SCRIPT = (
    "import os, sys, sysconfig; "
    "print(sys.prefix); "
    "print(os.path.dirname(sysconfig.get_paths()['purelib'])); "
    "print('%d.%d.%d' % tuple(sys.version_info[:3]))"
)


def parse_version(version_string: str) -> Optional[Tuple[int, ...]]:
    """Parse 'X.Y' or 'X.Y.Z' anywhere in a string into a tuple of ints."""
    match = re.search(r"(\d+)\.(\d+)(?:\.(\d+))?", version_string)
    if not match:
        return None
    return tuple(int(part) for part in match.groups() if part is not None)


@dataclass(frozen=True)
class InterpreterConfiguration:
    """A Python installation as seen by pip-frontend."""
    prefix_path: Path
    library_path: Path
    interpreter_path: Path
    version: Tuple[int, ...]

    @property
    def site_packages(self) -> Path:
        return self.library_path / "site-packages"

    def is_runnable(self) -> bool:
        return self.interpreter_path.is_file()

    def throw_if_not_runnable(self) -> None:
        """Raise NotRunnableError unless the interpreter can be launched."""
        if not self.is_runnable():
            raise NotRunnableError(self.interpreter_path, "interpreter not found")

    def is_secure_install(self) -> bool:
        """Whether pip can install over SSL for this interpreter.

        Python 2.5 and earlier do not include the required SSL support by
        default. No detection is done to determine whether the support has
        been added separately.
        """
        return tuple(self.version[:2]) > INSECURE_VERSION_LIMIT

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)


def from_interpreter(interpreter_path: Union[str, Path]) -> InterpreterConfiguration:
    """Build a configuration by asking the interpreter about itself.

    Args:
        interpreter_path: Path to a python executable.

    Returns:
        InterpreterConfiguration for that interpreter.

    Raises:
        NotRunnableError: If the interpreter is missing or the probe fails.
    """
    interpreter_path = Path(interpreter_path)
    if not interpreter_path.is_file():
        raise NotRunnableError(interpreter_path, "interpreter not found")

    try:
        result = subprocess.run(
            [str(interpreter_path), "-c", _PROBE_SCRIPT],
            capture_output=True,
            text=True,
            timeout=PROBE_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        raise NotRunnableError(interpreter_path, str(e)) from e

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if result.returncode != 0 or len(lines) < 3:
        raise NotRunnableError(
            interpreter_path,
            f"probe failed: {(result.stderr or result.stdout).strip()[:200]}",
        )

    version = parse_version(lines[2])
    if version is None:
        raise NotRunnableError(interpreter_path, f"unrecognized version {lines[2]!r}")

    config = InterpreterConfiguration(
        prefix_path=Path(lines[0]),
        library_path=Path(lines[1]),
        interpreter_path=interpreter_path,
        version=version,
    )
    logger.debug("Probed %s: prefix=%s version=%s",
                 interpreter_path, config.prefix_path, config.version_string)
    return config


def environment_interpreter(prefix_path: Union[str, Path]) -> Path:
    """Get the interpreter path inside a venv or installation prefix."""
    prefix_path = Path(prefix_path)
    if os.name == "nt":  # Windows
        candidates = [prefix_path / "Scripts" / "python.exe", prefix_path / "python.exe"]
    else:  # Unix/macOS
        candidates = [prefix_path / "bin" / "python3", prefix_path / "bin" / "python"]

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[-1]


def for_environment(prefix_path: Union[str, Path]) -> InterpreterConfiguration:
    """Build a configuration for the venv or installation at ``prefix_path``."""
    return from_interpreter(environment_interpreter(prefix_path))
