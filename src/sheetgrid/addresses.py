"""Spreadsheet-style cell addresses (``A1``, ``B2:C5``)."""

from __future__ import annotations

import re

_ADDR_RE = re.compile(r"^([A-Z]{1,3})(\d+)$")


def col_letter_to_index(letters: str) -> int:
    """Convert column letter(s) to 0-based index.  A=0, B=1, ..., Z=25, AA=26."""
    idx = 0
    for ch in letters.upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def index_to_col_letter(idx: int) -> str:
    """Convert 0-based column index to letter(s).  0=A, 25=Z, 26=AA."""
    result = ""
    n = idx + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        result = chr(65 + rem) + result
    return result


def parse_addr(addr: str) -> tuple[int, int]:
    """Parse 'A1' -> (row_0based, col_0based).

    Raises ValueError on bad address.
    """
    m = _ADDR_RE.match(addr.strip().upper())
    if not m or int(m.group(2)) < 1:
        raise ValueError(f"Invalid cell address: {addr!r}")
    col = col_letter_to_index(m.group(1))
    row = int(m.group(2)) - 1
    return row, col


def make_addr(row: int, col: int) -> str:
    """Build cell address from 0-based row/col."""
    return f"{index_to_col_letter(col)}{row + 1}"


def parse_range(text: str) -> tuple[int, int, int, int]:
    """Parse 'A1:C3' (or a single 'B2') into ``(r0, c0, r1, c1)``, normalized.

    Raises ValueError on bad input.
    """
    start, _, end = text.partition(":")
    r0, c0 = parse_addr(start)
    r1, c1 = parse_addr(end) if end else (r0, c0)
    return min(r0, r1), min(c0, c1), max(r0, r1), max(c0, c1)


def parse_column(text: str) -> int:
    """Parse a column given as letters (``"B"``) or a 0-based number (``"1"``)."""
    s = text.strip()
    if s.isdigit():
        return int(s)
    if not re.fullmatch(r"[A-Za-z]{1,3}", s):
        raise ValueError(f"Invalid column: {text!r}")
    return col_letter_to_index(s)
