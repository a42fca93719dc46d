"""Locates pip for an interpreter configuration.

pip may be installed as a script that needs the interpreter, as a native
launcher, or only as an importable module. Resolution is done fresh on
every call since installing pip changes the answer.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..runner.process import quote_single_argument
from .configuration import InterpreterConfiguration

logger = logging.getLogger(__name__)

TOOL_MODULE = "pip"

# Relative path from the prefix, and whether it is a Python script that
# must be run with the interpreter.
TOOL_LOCATIONS: Tuple[Tuple[Path, bool], ...] = (
    (Path("Scripts") / "pip-script.py", True),
    (Path("pip-script.py"), True),
    (Path("Scripts") / "pip.exe", False),
    (Path("pip.exe"), False),
)


@dataclass(frozen=True)
class ToolInvocation:
    """How to run pip for one configuration."""
    executable: Path
    leading_arguments: Tuple[str, ...] = ()
    requires_interpreter_prefix: bool = False

    def command(self, *args: str) -> list[str]:
        """Arguments to pass to ``executable`` for a pip command line."""
        return [*self.leading_arguments, *args]


class ToolLocator:
    """Resolves a ToolInvocation for an InterpreterConfiguration."""

    def __init__(self, locations=TOOL_LOCATIONS):
        self.locations = tuple(locations)

    def resolve(self, config: InterpreterConfiguration) -> ToolInvocation:
        """Return the first existing pip candidate, or ``python -m pip``."""
        for relative_path, is_script in self.locations:
            tool_path = config.prefix_path / relative_path
            if not tool_path.exists():
                continue

            logger.debug("Found pip at %s (script=%s)", tool_path, is_script)
            if is_script:
                return ToolInvocation(
                    executable=config.interpreter_path,
                    leading_arguments=(quote_single_argument(str(tool_path)),),
                    requires_interpreter_prefix=True,
                )
            return ToolInvocation(executable=tool_path)

        logger.debug("No pip executable under %s, using -m %s",
                     config.prefix_path, TOOL_MODULE)
        return ToolInvocation(
            executable=config.interpreter_path,
            leading_arguments=("-m", TOOL_MODULE),
            requires_interpreter_prefix=True,
        )
