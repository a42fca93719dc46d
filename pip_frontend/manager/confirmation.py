"""Confirmation prompts shown before installing."""

import asyncio
import enum
import inspect
import threading
from typing import Awaitable, Callable, Protocol, Union

import click


class ConfirmResult(enum.Enum):
    PROCEED = "proceed"
    CANCEL = "cancel"


class ConfirmationGate(Protocol):
    """Asks the user whether an installation may go ahead.

    ``confirm`` may return the result directly or an awaitable of it.
    """

    def confirm(self, message: str) -> Union[ConfirmResult, Awaitable[ConfirmResult]]:
        ...


async def ask(gate: ConfirmationGate, message: str) -> ConfirmResult:
    """Ask ``gate`` and wait for the answer, whether sync or async."""
    result = gate.confirm(message)
    if inspect.isawaitable(result):
        result = await result
    return result


def _console_prompt(message: str) -> bool:
    return click.confirm(message, default=True)


class ConsoleConfirmationGate:
    """Prompts on the terminal with click.

    The prompt blocks a daemon thread, not the event loop. Cancelling the
    awaiting task abandons the prompt; the thread does not hold up loop
    shutdown.

    Args:
        assume_yes: Answer PROCEED without prompting.
        prompt: Blocking ``prompt(message) -> bool``; click.confirm by default.
    """

    def __init__(self, assume_yes: bool = False, prompt: Callable[[str], bool] = _console_prompt):
        self.assume_yes = assume_yes
        self.prompt = prompt

    async def confirm(self, message: str) -> ConfirmResult:
        if self.assume_yes:
            return ConfirmResult.PROCEED

        loop = asyncio.get_running_loop()
        answer = loop.create_future()

        def deliver(value, error):
            if answer.done():
                return
            if error is not None:
                answer.set_exception(error)
            else:
                answer.set_result(value)

        def run_prompt():
            value, error = None, None
            try:
                value = self.prompt(message)
            except Exception as e:  # click.Abort on EOF, or a broken terminal
                error = e
            try:
                loop.call_soon_threadsafe(deliver, value, error)
            except RuntimeError:
                # The loop closed while the prompt was still waiting
                pass

        threading.Thread(target=run_prompt, name="confirm-prompt", daemon=True).start()
        return ConfirmResult.PROCEED if await answer else ConfirmResult.CANCEL
