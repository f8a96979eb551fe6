"""Rectangular range selection with an anchor and a focus cell."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from sheetgrid.store import CellStore


class InteractionState(str, Enum):
    idle = "idle"
    selecting = "selecting"


class Selection(BaseModel):
    """Anchor (start) and focus (end) of a selection rectangle."""

    model_config = ConfigDict(frozen=True)

    start_row: int
    start_col: int
    end_row: int
    end_col: int

    def bounds(self) -> tuple[int, int, int, int]:
        """Normalized rectangle as ``(min_row, max_row, min_col, max_col)``."""
        return (
            min(self.start_row, self.end_row),
            max(self.start_row, self.end_row),
            min(self.start_col, self.end_col),
            max(self.start_col, self.end_col),
        )

    def contains(self, row: int, col: int) -> bool:
        r0, r1, c0, c1 = self.bounds()
        return r0 <= row <= r1 and c0 <= col <= c1


class SelectionModel:
    """Owns the current selection and the pointer-drag state machine.

    Drag selection is ``begin`` → ``extend``* → ``end``.  ``end`` may arrive
    from anywhere (pointer released outside the grid) and with no
    intervening ``extend``, which leaves a single-cell selection.
    """

    def __init__(self, store: CellStore) -> None:
        self._store = store
        self.selection: Selection | None = None
        self.state = InteractionState.idle

    # ------------------------------------------------------------------
    # Clamping
    # ------------------------------------------------------------------

    def _clamp(self, row: int, col: int) -> tuple[int, int]:
        row = min(max(row, 0), self._store.row_count() - 1)
        col = min(max(col, 0), self._store.col_bound() - 1)
        return row, col

    # ------------------------------------------------------------------
    # Pointer interaction
    # ------------------------------------------------------------------

    def begin(self, row: int, col: int, extend: bool = False) -> Selection:
        """Start a selection at (row, col).

        With *extend* (shift-click) and an existing selection, only the
        focus moves and the drag state is left untouched.
        """
        row, col = self._clamp(row, col)
        if extend and self.selection is not None:
            self.selection = self.selection.model_copy(update={"end_row": row, "end_col": col})
            return self.selection
        self.selection = Selection(start_row=row, start_col=col, end_row=row, end_col=col)
        self.state = InteractionState.selecting
        return self.selection

    def extend(self, row: int, col: int) -> Selection | None:
        """Move the focus while dragging; ignored when idle."""
        if self.state is not InteractionState.selecting or self.selection is None:
            return self.selection
        row, col = self._clamp(row, col)
        self.selection = self.selection.model_copy(update={"end_row": row, "end_col": col})
        return self.selection

    def end(self) -> Selection | None:
        """Leave drag mode; the rectangle persists."""
        self.state = InteractionState.idle
        return self.selection

    # ------------------------------------------------------------------
    # Keyboard interaction
    # ------------------------------------------------------------------

    def move_focus_by(self, d_row: int, d_col: int, extend: bool = False) -> Selection | None:
        """Arrow-key navigation.

        Without *extend* the selection collapses to the new focus cell;
        with it, only the focus moves and the anchor is kept.  No-op when
        nothing is selected.
        """
        if self.selection is None:
            return None
        row, col = self._clamp(self.selection.end_row + d_row, self.selection.end_col + d_col)
        if extend:
            self.selection = self.selection.model_copy(update={"end_row": row, "end_col": col})
        else:
            self.selection = Selection(start_row=row, start_col=col, end_row=row, end_col=col)
        return self.selection

    def select(self, row: int, col: int) -> Selection:
        """Single-cell selection, without entering drag mode."""
        row, col = self._clamp(row, col)
        self.selection = Selection(start_row=row, start_col=col, end_row=row, end_col=col)
        return self.selection

    def clear(self) -> None:
        self.selection = None
        self.state = InteractionState.idle

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def bounds(self) -> tuple[int, int, int, int] | None:
        return self.selection.bounds() if self.selection is not None else None

    def contains(self, row: int, col: int) -> bool:
        return self.selection is not None and self.selection.contains(row, col)

    def is_valid(self) -> bool:
        """True when the selection lies entirely inside the current sheet."""
        if self.selection is None:
            return True
        r0, r1, c0, c1 = self.selection.bounds()
        return r0 >= 0 and c0 >= 0 and r1 < self._store.row_count() and c1 < self._store.col_bound()
