"""Shared fixtures and test doubles for pip-frontend tests."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from pip_frontend.interpreter.configuration import InterpreterConfiguration  # noqa: E402
from pip_frontend.manager.confirmation import ConfirmResult  # noqa: E402
from pip_frontend.runner.process import ProcessResult, unquote_argument  # noqa: E402


@dataclass
class RunCall:
    executable: str
    args: list[str]
    working_dir: Optional[str]
    env: Optional[dict]
    quote_args: bool
    elevate: bool


class FakeRunner:
    """ProcessRunner double that answers from a table instead of spawning.

    ``responses`` maps a key to a ProcessResult or an exception. A key
    matches a call if it is one of the arguments, or the file stem of one.
    """

    def __init__(self, responses: Optional[dict] = None):
        self.responses = responses or {}
        self.calls: list[RunCall] = []

    def calls_for(self, key: str) -> list[RunCall]:
        return [call for call in self.calls if self._matches(key, call.args)]

    @staticmethod
    def _matches(key: str, args) -> bool:
        for arg in args:
            if arg == key or Path(unquote_argument(arg)).stem == key:
                return True
        return False

    async def run(self, executable, args=(), working_dir=None, env=None,
                  visible=False, output=None, quote_args=True, elevate=False):
        args = list(args)
        self.calls.append(RunCall(
            executable=str(executable),
            args=args,
            working_dir=str(working_dir) if working_dir else None,
            env=dict(env) if env else None,
            quote_args=quote_args,
            elevate=elevate,
        ))

        response = ProcessResult(exit_code=0)
        for key, value in self.responses.items():
            if self._matches(key, args):
                response = value
                break

        if isinstance(response, BaseException):
            raise response
        if output is not None:
            for line in response.stdout_lines:
                output.write_line(line)
        return response


@dataclass
class FakeGate:
    """Confirmation gate that answers with a fixed result."""
    result: ConfirmResult = ConfirmResult.PROCEED
    messages: list[str] = field(default_factory=list)

    def confirm(self, message: str) -> ConfirmResult:
        self.messages.append(message)
        return self.result


@dataclass
class AsyncFakeGate(FakeGate):
    async def confirm(self, message: str) -> ConfirmResult:
        self.messages.append(message)
        return self.result


def make_configuration(root: Path, version=(3, 12, 1), runnable: bool = True) -> InterpreterConfiguration:
    prefix = root / "env"
    library = prefix / "Lib"
    prefix.mkdir(parents=True, exist_ok=True)
    interpreter = prefix / "python.exe"
    if runnable:
        interpreter.write_text("")
    return InterpreterConfiguration(
        prefix_path=prefix,
        library_path=library,
        interpreter_path=interpreter,
        version=tuple(version),
    )


@pytest.fixture
def config(tmp_path: Path) -> InterpreterConfiguration:
    return make_configuration(tmp_path)


@pytest.fixture
def site_packages(config: InterpreterConfiguration) -> Path:
    config.site_packages.mkdir(parents=True)
    return config.site_packages
