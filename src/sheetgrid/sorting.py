"""Stable single-column sort of the cell store.

The comparator compares numerically when both cells are numeric (numbers
or numeric text) and otherwise falls back to case-insensitive,
locale-aware text comparison.  Empty cells compare as ``""`` and so come
first in ascending order.
"""

from __future__ import annotations

import functools
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, ConfigDict
from pyuca import Collator

from sheetgrid.errors import InvalidIndex
from sheetgrid.search import SearchIndex
from sheetgrid.selection import SelectionModel
from sheetgrid.store import CellStore
from sheetgrid.values import EMPTY, CellValue


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class SortState(BaseModel):
    """Column and direction of the last applied sort (descriptive only)."""

    model_config = ConfigDict(frozen=True)

    column: int
    direction: SortDirection


@functools.lru_cache(maxsize=None)
def _collator() -> Collator:
    # Loads the DUCET table once; root-locale Unicode collation
    return Collator()


def collation_key(text: str) -> tuple[int, ...]:
    """Case-insensitive Unicode collation key for *text*."""
    return _collator().sort_key(text.casefold())


def compare_cells(a: CellValue, b: CellValue) -> int:
    """Three-way compare two cells for ascending order."""
    a_num = a.as_number()
    b_num = b.as_number()
    if a_num is not None and b_num is not None:
        return (a_num > b_num) - (a_num < b_num)
    a_key = collation_key(a.text)
    b_key = collation_key(b.text)
    return (a_key > b_key) - (a_key < b_key)


def sort_rows(
    rows: Sequence[Sequence[CellValue]],
    col: int,
    direction: SortDirection = SortDirection.asc,
) -> list[list[CellValue]]:
    """Return *rows* sorted by column *col*.

    The sort is stable in both directions: descending inverts the
    comparator instead of reversing the output, so tied rows keep their
    document order.
    """

    def cell(row: Sequence[CellValue]) -> CellValue:
        return row[col] if col < len(row) else EMPTY

    sign = 1 if direction is SortDirection.asc else -1

    def cmp(a: Sequence[CellValue], b: Sequence[CellValue]) -> int:
        return sign * compare_cells(cell(a), cell(b))

    return sorted((list(r) for r in rows), key=functools.cmp_to_key(cmp))


def next_direction(previous: SortState | None, col: int) -> SortDirection:
    """Toggle to ``desc`` only when *col* was just sorted ascending."""
    if previous is not None and previous.column == col and previous.direction is SortDirection.asc:
        return SortDirection.desc
    return SortDirection.asc


class SortEngine:
    """Reorders the store's rows and invalidates position-bound state."""

    def __init__(self, store: CellStore, selection: SelectionModel, search: SearchIndex) -> None:
        self._store = store
        self._selection = selection
        self._search = search
        self.state: SortState | None = None

    def sort_by_column(self, col: int) -> SortState:
        """Sort by column *col*, toggling direction on a repeated click."""
        if col < 0:
            raise InvalidIndex("col", col)
        direction = next_direction(self.state, col)
        self._store.replace_rows(sort_rows(self._store.rows(), col, direction))
        self.state = SortState(column=col, direction=direction)
        self._selection.clear()
        self._search.clear()
        return self.state
