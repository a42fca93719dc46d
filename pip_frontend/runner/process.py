"""Asynchronous process runner.

Runs an external program, streams its output line by line to an optional
sink and collects it for later inspection. The child process is always
reaped, including when the awaiting task is cancelled.
"""

import asyncio
import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from ..errors import ElevationUnavailableError, NotRunnableError
from ..output import OutputSink

logger = logging.getLogger(__name__)

# Longest single output line accepted from a child process
STREAM_LIMIT = 1024 * 1024


@dataclass(frozen=True)
class ProcessResult:
    """Exit code and captured output of a finished process."""
    exit_code: int
    stdout_lines: tuple[str, ...] = ()
    stderr_lines: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def quote_single_argument(arg: str) -> str:
    """Quote an argument for a command line if it contains whitespace.

    Arguments that are already wrapped in double quotes are returned as-is.
    """
    if not arg:
        return '""'
    if len(arg) > 1 and arg.startswith('"') and arg.endswith('"'):
        return arg
    if not any(c.isspace() for c in arg) and '"' not in arg:
        return arg

    escaped = arg.replace('"', '\\"')
    # A trailing backslash would escape the closing quote
    escaped = re.sub(r"(\\+)$", r"\1\1", escaped)
    return f'"{escaped}"'


def unquote_argument(arg: str) -> str:
    """Undo one level of quote_single_argument."""
    if len(arg) < 2 or not (arg.startswith('"') and arg.endswith('"')):
        return arg
    inner = arg[1:-1]
    inner = re.sub(r"(\\+)$", lambda m: m.group(1)[: len(m.group(1)) // 2], inner)
    return inner.replace('\\"', '"')


def _resolve_executable(executable: str) -> Optional[str]:
    if Path(executable).is_file():
        return executable
    if os.sep not in executable and (os.altsep is None or os.altsep not in executable):
        return shutil.which(executable)
    return None


def _elevation_prefix() -> list[str]:
    if os.name == "nt":
        raise ElevationUnavailableError(
            "Elevated processes cannot redirect their output on Windows. "
            "Run pip-frontend from an administrator prompt instead."
        )
    if os.geteuid() == 0:
        return []
    sudo = shutil.which("sudo")
    if not sudo:
        raise ElevationUnavailableError("Elevation requested but sudo was not found.")
    return [sudo, "-E", "--"]


def _emit(raw: bytes, lines: list[str], callback) -> None:
    line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
    lines.append(line)
    if callback is not None:
        callback(line)


async def _pump(stream, lines: list[str], callback) -> None:
    pending = bytearray()
    while True:
        try:
            chunk = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            # EOF; whatever is left is an unterminated last line
            pending.extend(e.partial)
            if pending:
                _emit(bytes(pending), lines, callback)
            return
        except asyncio.LimitOverrunError as e:
            # Line longer than STREAM_LIMIT: move the buffered part aside
            # and keep reading until its newline turns up
            pending.extend(await stream.read(max(e.consumed, 1)))
            continue
        pending.extend(chunk)
        _emit(bytes(pending), lines, callback)
        pending.clear()


class ProcessRunner:
    """Launches external programs for the package manager."""

    async def run(
        self,
        executable: Union[str, Path],
        args: Sequence[str] = (),
        working_dir: Optional[Union[str, Path]] = None,
        env: Optional[Mapping[str, str]] = None,
        visible: bool = False,
        output: Optional[OutputSink] = None,
        quote_args: bool = True,
        elevate: bool = False,
    ) -> ProcessResult:
        """Run a program to completion.

        Args:
            executable: Program to run. Either a path or a name on PATH.
            args: Program arguments.
            working_dir: Working directory for the child. None = inherit.
            env: Variables added to (or replacing) the current environment.
            visible: Whether a console window may be shown (Windows only).
            output: Sink receiving stdout and stderr lines as they arrive.
            quote_args: True if ``args`` are raw values. False if they are
                command line fragments that may already be quoted.
            elevate: Run with administrator privileges.

        Returns:
            ProcessResult with the exit code and captured lines.

        Raises:
            NotRunnableError: If the executable does not exist or cannot
                be started. No process is spawned.
            ElevationUnavailableError: If elevation is not possible.
        """
        executable = str(executable)
        resolved = _resolve_executable(executable)
        if resolved is None:
            raise NotRunnableError(executable)

        if quote_args:
            argv = list(args)
            command_line = " ".join(quote_single_argument(a) for a in [executable, *args])
        else:
            argv = [unquote_argument(a) for a in args]
            command_line = " ".join([quote_single_argument(executable), *args])

        argv = [resolved, *argv]
        if elevate:
            argv = _elevation_prefix() + argv

        merged_env = os.environ.copy()
        if env:
            merged_env.update(env)

        kwargs = {}
        if os.name == "nt" and not visible:
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        logger.debug("Running %s (cwd=%s, elevate=%s)", command_line, working_dir, elevate)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(working_dir) if working_dir else None,
                env=merged_env,
                limit=STREAM_LIMIT,
                **kwargs,
            )
        except OSError as e:
            raise NotRunnableError(executable, str(e)) from e

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []
        pumps = [
            asyncio.ensure_future(_pump(
                process.stdout, stdout_lines, output.write_line if output is not None else None,
            )),
            asyncio.ensure_future(_pump(
                process.stderr, stderr_lines, output.write_error_line if output is not None else None,
            )),
        ]
        try:
            await asyncio.gather(*pumps)
            exit_code = await process.wait()
        finally:
            for pump in pumps:
                pump.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)
            if process.returncode is None:
                logger.debug("Killing %s (pid %s)", executable, process.pid)
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        logger.debug("%s exited with code %s", executable, exit_code)
        return ProcessResult(
            exit_code=exit_code,
            stdout_lines=tuple(stdout_lines),
            stderr_lines=tuple(stderr_lines),
        )
