"""Output sinks for pip-frontend operations.

A sink receives line-oriented text from package operations. The manager
only writes to it and asks it to become visible; it never reads its state.
"""

from dataclasses import dataclass, field
from typing import Protocol

import click


class OutputSink(Protocol):
    """Line-oriented output target."""

    def write_line(self, text: str) -> None:
        ...

    def write_error_line(self, text: str) -> None:
        ...

    def show(self) -> None:
        ...

    def show_and_activate(self) -> None:
        ...


class ConsoleOutputSink:
    """Writes to the terminal using click."""

    def write_line(self, text: str) -> None:
        click.echo(text)

    def write_error_line(self, text: str) -> None:
        click.echo(text, err=True)

    def show(self) -> None:
        click.get_text_stream("stdout").flush()

    def show_and_activate(self) -> None:
        self.show()
        click.echo("")


@dataclass
class RecordingOutputSink:
    """Keeps everything written to it in memory."""
    lines: list[str] = field(default_factory=list)
    error_lines: list[str] = field(default_factory=list)
    show_count: int = 0
    activate_count: int = 0

    def write_line(self, text: str) -> None:
        self.lines.append(text)

    def write_error_line(self, text: str) -> None:
        self.error_lines.append(text)

    def show(self) -> None:
        self.show_count += 1

    def show_and_activate(self) -> None:
        self.activate_count += 1
