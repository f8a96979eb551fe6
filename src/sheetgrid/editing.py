"""In-place editing of a single cell.

The UI decides *when* to commit (Enter, loss of focus) or cancel (Escape);
the session only holds the draft until then.
"""

from __future__ import annotations

from typing import Any

from sheetgrid.errors import InvalidIndex
from sheetgrid.store import CellStore
from sheetgrid.values import CellValue


class EditSession:
    """At most one open edit: ``(row, col, draft)``."""

    def __init__(self, store: CellStore) -> None:
        self._store = store
        self.row: int | None = None
        self.col: int | None = None
        self.draft: Any = None

    @property
    def is_open(self) -> bool:
        return self.row is not None

    def start(self, row: int, col: int, initial_value: Any = "") -> Any:
        """Open an edit at (row, col) and return the draft.

        An open session on another cell is committed first.  Starting on
        the cell already being edited keeps the existing draft.
        """
        if row < 0:
            raise InvalidIndex("row", row)
        if col < 0:
            raise InvalidIndex("col", col)
        if self.is_open:
            if (self.row, self.col) == (row, col):
                return self.draft
            self.commit()
        self.row, self.col, self.draft = row, col, initial_value
        return self.draft

    def set_draft(self, value: Any) -> None:
        if self.is_open:
            self.draft = value

    def commit(self) -> bool:
        """Write the draft into the store and close the session.

        Returns:
            True if a value was written, False if no session was open.
        """
        if not self.is_open:
            return False
        self._store.set(self.row, self.col, CellValue.from_input(self.draft))
        self._reset()
        return True

    def cancel(self) -> bool:
        """Discard the draft.  Returns False if no session was open."""
        if not self.is_open:
            return False
        self._reset()
        return True

    def _reset(self) -> None:
        self.row = self.col = None
        self.draft = None
