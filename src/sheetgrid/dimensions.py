"""Per-track size overrides and frozen-pane offsets."""

from __future__ import annotations

from typing import Any, Literal

from sheetgrid.config import DEFAULT_CONFIG
from sheetgrid.errors import InvalidIndex

Axis = Literal["row", "col"]


def _remap_tracks(sizes: dict[int, int], index: int, count: int) -> dict[int, int]:
    """Rebuild a track-size dict with shifted indices.

    Args:
        sizes: Overrides keyed by 0-based track index.
        index: 0-based index where insertion/deletion happens.
        count: +1 for insert, -1 for delete.

    Returns:
        New dict.  On delete, the override at *index* is dropped.
    """
    out: dict[int, int] = {}
    for pos, size in sizes.items():
        if count > 0:
            if pos >= index:
                pos += count
        else:
            if pos == index:
                continue  # drop
            if pos > index:
                pos += count
        out[pos] = size
    return out


class DimensionTable:
    """Column widths and row heights, defaulting when never resized.

    Entries are created lazily by :meth:`resize_column` / :meth:`resize_row`
    and re-indexed by the ``shift_on_*`` methods so an override follows its
    logical track across structural mutations.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        cfg = dict(DEFAULT_CONFIG)
        cfg.update(config or {})
        self.default_col_width = int(cfg["default_col_width"])
        self.default_row_height = int(cfg["default_row_height"])
        self.min_col_width = int(cfg["min_col_width"])
        self.min_row_height = int(cfg["min_row_height"])
        self.row_header_width = int(cfg["row_header_width"])
        self.col_header_height = int(cfg["col_header_height"])
        self.frozen_rows = int(cfg["frozen_rows"])
        self.frozen_columns = int(cfg["frozen_columns"])
        self._widths: dict[int, int] = {}
        self._heights: dict[int, int] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def width_of(self, col: int) -> int:
        return self._widths.get(col, self.default_col_width)

    def height_of(self, row: int) -> int:
        return self._heights.get(row, self.default_row_height)

    # ------------------------------------------------------------------
    # Resize
    # ------------------------------------------------------------------

    def resize_column(self, col: int, delta: int) -> int:
        """Grow or shrink column *col* by *delta*, floored at the minimum width.

        Returns:
            The new width.
        """
        if col < 0:
            raise InvalidIndex("col", col)
        width = max(self.min_col_width, self.width_of(col) + delta)
        self._widths[col] = width
        return width

    def resize_row(self, row: int, delta: int) -> int:
        """Grow or shrink row *row* by *delta*, floored at the minimum height.

        Returns:
            The new height.
        """
        if row < 0:
            raise InvalidIndex("row", row)
        height = max(self.min_row_height, self.height_of(row) + delta)
        self._heights[row] = height
        return height

    # ------------------------------------------------------------------
    # Structural re-indexing
    # ------------------------------------------------------------------

    def _sizes(self, axis: Axis) -> dict[int, int]:
        if axis == "row":
            return self._heights
        if axis == "col":
            return self._widths
        raise ValueError(f"axis must be 'row' or 'col', got {axis!r}")

    def _store(self, axis: Axis, sizes: dict[int, int]) -> None:
        if axis == "row":
            self._heights = sizes
        else:
            self._widths = sizes

    def shift_on_insert(self, axis: Axis, index: int) -> None:
        """Move overrides at or after *index* one track forward."""
        self._store(axis, _remap_tracks(self._sizes(axis), index, 1))

    def shift_on_delete(self, axis: Axis, index: int) -> None:
        """Drop the override at *index*; move later overrides one track back."""
        self._store(axis, _remap_tracks(self._sizes(axis), index, -1))

    # ------------------------------------------------------------------
    # Frozen panes
    # ------------------------------------------------------------------

    def is_frozen_col(self, col: int) -> bool:
        return 0 <= col < self.frozen_columns

    def is_frozen_row(self, row: int) -> bool:
        return 0 <= row < self.frozen_rows

    def frozen_col_left(self, col: int) -> int:
        """Left offset of column *col* when pinned: row header + preceding widths."""
        return self.row_header_width + sum(self.width_of(c) for c in range(max(col, 0)))

    def frozen_row_top(self, row: int) -> int:
        """Top offset of row *row* when pinned: column header + preceding heights."""
        return self.col_header_height + sum(self.height_of(r) for r in range(max(row, 0)))

    def snapshot(self) -> dict[str, dict[int, int]]:
        """Copy of the explicit overrides (defaults are not listed)."""
        return {"widths": dict(self._widths), "heights": dict(self._heights)}
