"""Console output abstraction.

This module provides a protocol for console output that can be implemented
by different backends (Rich, mock for testing). Release steps print their
progress, echoed commands and verification results through it without
depending on a specific library.
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
    SUCCESS = auto()  # Green, positive message
    ERROR = auto()  # Red, fatal message
    WARNING = auto()  # Yellow, warning or abort
    INFO = auto()  # Blue, prompts and information
    DIM = auto()  # Muted detail
    STEP = auto()  # Numbered step label
    COMMAND = auto()  # Echoed external command
    VERIFIED = auto()  # Loud verification result

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output.

    Implementations can use Rich or capture output for testing. Messages are
    printed verbatim: commit subjects such as `Bump x (@dependabot[bot])` must
    not be interpreted as markup.
    """

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def step(self, number: int, label: str) -> None:
        """Print a numbered step label (`Step 3: Create the release branch`)."""
        ...

    def command(self, text: str) -> None:
        """Echo an external command before it runs."""
        ...

    def verified(self, situation: str) -> None:
        """Report a passed loud verification."""
        ...


class RichConsole:
    """Console implementation using the Rich library."""

    def __init__(self) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "bright_green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "bright_blue",
            Style.DIM: "dim",
            Style.STEP: "bright_yellow",
            Style.COMMAND: "blue",
            Style.VERIFIED: "bright_magenta",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self.print(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble(("error: ", "red bold"), message))

    def warning(self, message: str) -> None:
        self.print(message, Style.WARNING)

    def info(self, message: str) -> None:
        self.print(message, Style.INFO)

    def step(self, number: int, label: str) -> None:
        self.print(f"Step {number}: {label}", Style.STEP)

    def command(self, text: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble("> ", (text, "blue")))

    def verified(self, situation: str) -> None:
        self.print(f"Verified: {situation}", Style.VERIFIED)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    """Factory for empty outputs list (helps type inference)."""
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.INFO))

    def step(self, number: int, label: str) -> None:
        self.outputs.append(OutputRecord(f"Step {number}: {label}", Style.STEP))

    def command(self, text: str) -> None:
        self.outputs.append(OutputRecord(f"> {text}", Style.COMMAND))

    def verified(self, situation: str) -> None:
        self.outputs.append(OutputRecord(f"Verified: {situation}", Style.VERIFIED))

    # Test helper methods

    @property
    def messages(self) -> list[str]:
        """Get all output messages as a list of strings."""
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """Get all output as a single newline-separated string."""
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        """Count outputs with a specific style."""
        return sum(1 for o in self.outputs if o.style == style)
