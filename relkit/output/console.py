"""Console output abstraction.

The release pipeline reports each step through ``ConsoleProtocol`` rather
than printing directly. ``RichConsole`` is used by the CLI and
``MockConsole`` captures output in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()  # One per pipeline step

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for human-readable release progress output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling.

        Args:
            message: The text to print
            style: The style to apply
        """
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


# Label printed before the message, and its rich style.
_LABELS: dict[Style, tuple[str, str]] = {
    Style.SUCCESS: ("OK", "green"),
    Style.ERROR: ("error:", "red bold"),
    Style.WARNING: ("warning:", "yellow"),
    Style.INFO: ("info:", "cyan"),
}

_RICH_STYLES: dict[Style, str] = {
    Style.DIM: "dim",
    Style.HEADER: "blue bold",
    **{style: rich_style for style, (_, rich_style) in _LABELS.items()},
}


class RichConsole:
    """Console implementation using Rich library.

    Messages are never parsed as rich markup; commit messages, paths and tool
    output routinely contain square brackets.
    """

    def __init__(self, *, no_color: bool = False) -> None:
        from rich.console import Console

        self._console = Console(no_color=no_color, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = _RICH_STYLES.get(style)
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def _labelled(self, style: Style, message: str) -> None:
        from rich.markup import escape

        label, rich_style = _LABELS[style]
        self._console.print(f"[{rich_style}]{label}[/{rich_style}] {escape(message)}")

    def success(self, message: str) -> None:
        self._labelled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._labelled(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._labelled(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._labelled(Style.INFO, message)

    def header(self, message: str) -> None:
        self._console.print()
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self._console.print()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Records output instead of printing it.

    Labelled messages are stored with their label, so assertions read like the
    terminal: ``"error: push: rejected"``.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def _labelled(self, style: Style, message: str) -> None:
        label, _ = _LABELS[style]
        self.outputs.append(OutputRecord(f"{label} {message}", style))

    def success(self, message: str) -> None:
        self._labelled(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._labelled(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._labelled(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._labelled(Style.INFO, message)

    def header(self, message: str) -> None:
        self.print(message, Style.HEADER)

    def newline(self) -> None:
        self.print("")

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    @property
    def headers(self) -> list[str]:
        """Step headers in the order they were printed."""
        return [o.message for o in self.outputs if o.style is Style.HEADER]

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style is Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
