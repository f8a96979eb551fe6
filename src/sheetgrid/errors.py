"""Error types for the grid engine."""

from __future__ import annotations

from pathlib import Path


class GridError(Exception):
    """Base class for all grid engine errors."""


class InvalidIndex(GridError, IndexError):
    """A negative row/column index was passed to an addressing operation.

    Attributes:
        axis: ``"row"`` or ``"col"``.
        index: The offending index.
    """

    def __init__(self, axis: str, index: int) -> None:
        self.axis = axis
        self.index = index
        super().__init__(f"Invalid {axis} index: {index}")


class DecodeFailure(GridError):
    """The spreadsheet decoder could not parse its source.

    Attributes:
        source: Path (or name) of the source that failed.
        reason: Human-readable description.
    """

    def __init__(self, source: str | Path, reason: str) -> None:
        self.source = str(source)
        self.reason = reason
        super().__init__(f"Could not decode {self.source!r}: {reason}")


class UnknownSheet(GridError, KeyError):
    """Reference to a sheet name that is not in the loaded workbook.

    Attributes:
        name: The unresolved sheet name.
        available: Names that are currently loaded.
    """

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        msg = f"Sheet {name!r} not found"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class EngineBusy(GridError):
    """A mutating command was issued while a sheet load is in flight."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Cannot run {command!r} while a sheet is loading")
