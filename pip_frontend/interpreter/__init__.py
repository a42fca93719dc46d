"""Interpreter module - configuration and pip location."""

from .configuration import (
    InterpreterConfiguration,
    for_environment,
    from_interpreter,
    parse_version,
)
from .locator import ToolInvocation, ToolLocator

__all__ = [
    "InterpreterConfiguration",
    "for_environment",
    "from_interpreter",
    "parse_version",
    "ToolInvocation",
    "ToolLocator",
]
