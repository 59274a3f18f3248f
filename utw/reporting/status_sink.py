"""Live status display for a test run.

The run aggregator only talks to the ``StatusSink`` protocol: one spinner
line that is redrawn in place while a test is running, and permanent lines
that scroll above it.  ``ConsoleStatusSink`` implements it on a ``rich``
console; passing a console created with ``no_color=True`` renders the same
lines without ANSI styling.
"""

from __future__ import annotations

from typing import Protocol, Union

from rich.console import Console
from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

SinkText = Union[str, Text]

INDENT = "  "


def _as_text(value: SinkText) -> Text:
    # Plain strings are never interpreted as console markup.
    if isinstance(value, Text):
        return value
    return Text(value)


def indented(depth: int, text: SinkText) -> Text:
    """Prefix *text* with two spaces per depth level."""
    line = Text(INDENT * depth)
    line.append_text(_as_text(text))
    return line


class StatusSink(Protocol):
    """Display surface driven by the run aggregator."""

    def start_spinner(self, depth: int, label: SinkText) -> None: ...

    def update_active_label(self, label: SinkText) -> None: ...

    def stop_and_persist(self, symbol: SinkText, depth: int, text: SinkText) -> None: ...

    def print_plain_line(self, text: SinkText) -> None: ...

    def print_blank_line(self) -> None: ...


class ConsoleStatusSink:
    """``StatusSink`` backed by a ``rich`` live spinner.

    At most one spinner is active.  Starting a new spinner while one is
    still running discards the old one without persisting it.
    """

    def __init__(
        self,
        console: Console | None = None,
        spinner: str = "dots",
        refresh_per_second: float = 12.5,
    ) -> None:
        self.console = console or Console(highlight=False)
        self.spinner_name = spinner
        self.refresh_per_second = refresh_per_second
        self._live: Live | None = None
        self._spinner: Spinner | None = None

    @property
    def is_spinning(self) -> bool:
        return self._live is not None

    def start_spinner(self, depth: int, label: SinkText) -> None:
        self._stop()
        self._spinner = Spinner(self.spinner_name, text=_as_text(label))
        self._live = Live(
            Padding(self._spinner, (0, 0, 0, len(INDENT) * depth)),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            transient=True,
        )
        self._live.start()

    def update_active_label(self, label: SinkText) -> None:
        if self._spinner is not None:
            self._spinner.update(text=_as_text(label))

    def stop_and_persist(self, symbol: SinkText, depth: int, text: SinkText) -> None:
        self._stop()
        line = Text(INDENT * depth)
        symbol = _as_text(symbol)
        if symbol.plain:
            line.append_text(symbol)
            line.append(" ")
        line.append_text(_as_text(text))
        self.console.print(line, soft_wrap=True)

    def print_plain_line(self, text: SinkText) -> None:
        self.console.print(_as_text(text), soft_wrap=True)

    def print_blank_line(self) -> None:
        self.console.print()

    def close(self) -> None:
        """Stop the spinner, if any, without persisting it."""
        self._stop()

    def _stop(self) -> None:
        if self._live is not None:
            self._live.stop()
        self._live = None
        self._spinner = None
