"""Tagged cell values.

Every raw value handed over by a decoder is resolved once, at ingestion,
into a :class:`CellValue` carrying an explicit :class:`CellKind`.  Sorting,
search, statistics and copy all work from the resolved kind and its text
form instead of re-inferring types string by string.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CellKind(str, Enum):
    text = "text"
    number = "number"
    bool = "bool"
    empty = "empty"


def parse_number(text: str) -> float | None:
    """Parse *text* as a finite number, or return None.

    Surrounding whitespace is ignored.  Underscore digit separators, NaN
    and infinities are rejected.
    """
    s = text.strip()
    if not s or "_" in s:
        return None
    try:
        num = float(s)
    except ValueError:
        return None
    if not math.isfinite(num):
        return None
    return num


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


class CellValue(BaseModel):
    """A single resolved cell value."""

    model_config = ConfigDict(frozen=True)

    kind: CellKind
    value: str | int | float | bool | None = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_raw(cls, raw: Any) -> CellValue:
        """Resolve a raw decoder value into a tagged cell value.

        ``None`` and ``""`` become empty; booleans, ints and finite floats
        keep their type; everything else is stored as text.
        """
        if isinstance(raw, CellValue):
            return raw
        if raw is None or raw == "":
            return EMPTY
        if isinstance(raw, bool):
            return cls(kind=CellKind.bool, value=raw)
        if isinstance(raw, (int, float)):
            if isinstance(raw, float) and not math.isfinite(raw):
                return cls(kind=CellKind.text, value=str(raw))
            return cls(kind=CellKind.number, value=raw)
        if isinstance(raw, str):
            return cls(kind=CellKind.text, value=raw)
        return cls(kind=CellKind.text, value=str(raw))

    @classmethod
    def from_input(cls, raw: Any) -> CellValue:
        """Resolve user-typed input.

        Strings that parse as a finite number are stored as numbers (ints
        when written without a decimal point or exponent); other input goes
        through :meth:`from_raw`.
        """
        if not isinstance(raw, str):
            return cls.from_raw(raw)
        num = parse_number(raw)
        if num is None:
            return cls.from_raw(raw)
        s = raw.strip()
        if num.is_integer() and not any(ch in s for ch in ".eE"):
            return cls(kind=CellKind.number, value=int(num))
        return cls(kind=CellKind.number, value=num)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.empty

    @property
    def text(self) -> str:
        """Text representation used for display, search, sort and copy."""
        if self.kind is CellKind.empty:
            return ""
        if self.kind is CellKind.bool:
            return "true" if self.value else "false"
        if self.kind is CellKind.number:
            return _format_number(self.value)  # type: ignore[arg-type]
        return str(self.value)

    def as_number(self) -> float | None:
        """Numeric interpretation: numbers and numeric text, else None."""
        if self.kind is CellKind.number:
            return float(self.value)  # type: ignore[arg-type]
        if self.kind is CellKind.text:
            return parse_number(str(self.value))
        return None

    def to_raw(self) -> Any:
        """Plain Python value for encoders (``None`` for empty)."""
        return None if self.kind is CellKind.empty else self.value


EMPTY = CellValue(kind=CellKind.empty)
