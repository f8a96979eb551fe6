"""Case-insensitive substring search over every cell."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from sheetgrid.selection import SelectionModel
from sheetgrid.store import CellStore


class SearchResult(BaseModel):
    """Matches of the latest query and the jump cursor."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    matches: tuple[tuple[int, int], ...] = ()
    cursor: int = 0
    no_matches: bool = False

    @property
    def current(self) -> tuple[int, int] | None:
        if not self.matches:
            return None
        return self.matches[self.cursor]


def find_matches(store: CellStore, query: str) -> list[tuple[int, int]]:
    """Return ``(row, col)`` of every cell whose text contains *query*.

    Matching is case-insensitive, rows in order and columns in order within
    a row.  An empty or whitespace-only query matches nothing.
    """
    if not query.strip():
        return []
    term = query.casefold()
    return [(r, c) for r, c, value in store.iter_cells() if term in value.text.casefold()]


class SearchIndex:
    """Caches the latest result list and cursor for "jump to next match"."""

    def __init__(self, store: CellStore, selection: SelectionModel) -> None:
        self._store = store
        self._selection = selection
        self.result = SearchResult()

    def search(self, query: str) -> SearchResult:
        """Run *query*, replacing any previous result.

        A hit selects the first match.  A miss clears the selection and
        flags ``no_matches``.  A blank query clears the result and leaves
        the selection alone.
        """
        if not query.strip():
            self.result = SearchResult(query=query)
            return self.result
        matches = find_matches(self._store, query)
        if matches:
            self._selection.select(*matches[0])
            self.result = SearchResult(query=query, matches=tuple(matches))
        else:
            self._selection.clear()
            self.result = SearchResult(query=query, no_matches=True)
        return self.result

    def next(self) -> tuple[int, int] | None:
        """Advance the cursor circularly and select the new match."""
        if not self.result.matches:
            return None
        cursor = (self.result.cursor + 1) % len(self.result.matches)
        self.result = self.result.model_copy(update={"cursor": cursor})
        row, col = self.result.matches[cursor]
        self._selection.select(row, col)
        return row, col

    def clear(self) -> None:
        self.result = SearchResult()
