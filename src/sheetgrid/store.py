"""2-D cell store for the active sheet."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

from sheetgrid.errors import InvalidIndex
from sheetgrid.values import EMPTY, CellValue


class CellStore:
    """Ordered rows of :class:`CellValue`.

    Rows may be ragged.  A row shorter than :meth:`max_cols` is logically
    padded with empty values; readers never see an IndexError.  Row order
    is meaningful (document order, rearranged by sorting).
    """

    def __init__(self, rows: Iterable[Sequence[CellValue]] | None = None) -> None:
        self._rows: list[list[CellValue]] = [list(r) for r in rows or []]
        if not self._rows:
            self._rows = [[]]

    @classmethod
    def from_matrix(cls, matrix: Iterable[Sequence[Any] | None]) -> CellStore:
        """Build a store from a raw decoder matrix.

        ``None`` rows are treated as empty rows.  An empty matrix yields a
        single empty row.
        """
        return cls([CellValue.from_raw(v) for v in (row or [])] for row in matrix)

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    def row_count(self) -> int:
        return len(self._rows)

    def max_cols(self) -> int:
        return max((len(r) for r in self._rows), default=0)

    def col_bound(self) -> int:
        """Number of addressable columns (at least one, for clamping)."""
        return max(self.max_cols(), 1)

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def get(self, row: int, col: int) -> CellValue:
        """Return the value at (row, col), or empty when out of range."""
        if row < 0 or col < 0 or row >= len(self._rows):
            return EMPTY
        cells = self._rows[row]
        if col >= len(cells):
            return EMPTY
        return cells[col]

    def set(self, row: int, col: int, value: Any) -> None:
        """Write *value* at (row, col), growing the sheet as needed.

        Raises:
            InvalidIndex: If *row* or *col* is negative.
        """
        if row < 0:
            raise InvalidIndex("row", row)
        if col < 0:
            raise InvalidIndex("col", col)
        while len(self._rows) <= row:
            self._rows.append([])
        cells = self._rows[row]
        if len(cells) <= col:
            cells.extend([EMPTY] * (col + 1 - len(cells)))
        cells[col] = CellValue.from_raw(value)

    def row(self, index: int) -> list[CellValue]:
        """Return a copy of the physically stored cells of row *index*."""
        if index < 0 or index >= len(self._rows):
            return []
        return list(self._rows[index])

    def rows(self) -> list[list[CellValue]]:
        """Return a shallow copy of every physical row."""
        return [list(r) for r in self._rows]

    def iter_cells(self) -> Iterator[tuple[int, int, CellValue]]:
        """Yield (row, col, value) for every physically stored cell, row-major."""
        for r, cells in enumerate(self._rows):
            for c, value in enumerate(cells):
                yield r, c, value

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def replace_rows(self, new_rows: Iterable[Sequence[CellValue]]) -> None:
        """Atomically replace every row.

        Dependent state (selection, search, sizes) is the caller's concern.
        """
        rows = [list(r) for r in new_rows]
        self._rows = rows if rows else [[]]

    def to_matrix(self, pad: bool = True) -> list[list[Any]]:
        """Export the cells as plain Python values.

        Args:
            pad: Pad every row with ``None`` up to :meth:`max_cols`.
        """
        width = self.max_cols()
        out: list[list[Any]] = []
        for cells in self._rows:
            raw = [v.to_raw() for v in cells]
            if pad and len(raw) < width:
                raw.extend([None] * (width - len(raw)))
            out.append(raw)
        return out
