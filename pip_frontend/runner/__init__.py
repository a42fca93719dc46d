"""Runner module - external process execution."""

from .process import (
    ProcessResult,
    ProcessRunner,
    quote_single_argument,
    unquote_argument,
)

__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "quote_single_argument",
    "unquote_argument",
]
