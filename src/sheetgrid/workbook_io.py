"""Decoder and encoder adapters around the grid engine.

The engine itself never touches bytes: it consumes raw value matrices and
hands them back on export.  This module turns ``.xlsx`` files (openpyxl)
and ``.csv`` files into such matrices and back; CSV export goes through
Polars.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Sequence

import openpyxl
import polars as pl
from pydantic import BaseModel

from sheetgrid.errors import DecodeFailure
from sheetgrid.values import CellValue

logger = logging.getLogger(__name__)

XLSX_SUFFIXES = (".xlsx", ".xlsm")
CSV_SUFFIXES = (".csv",)


class DecodedWorkbook(BaseModel):
    """Raw matrices per sheet, in workbook order."""

    source: str
    sheet_names: list[str]
    sheets: dict[str, list[list[Any]]]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _trim_row(row: Sequence[Any]) -> list[Any]:
    """Drop trailing blanks so rows stay ragged rather than padded."""
    cells = list(row)
    while cells and (cells[-1] is None or cells[-1] == ""):
        cells.pop()
    return cells


def _limit(matrix: list[list[Any]], max_rows: int | None, max_cols: int | None) -> list[list[Any]]:
    if max_rows is not None:
        matrix = matrix[:max_rows]
    if max_cols is not None:
        matrix = [row[:max_cols] for row in matrix]
    return matrix


def _decode_xlsx(path: Path) -> tuple[list[str], dict[str, list[list[Any]]]]:
    try:
        wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    except Exception as exc:  # openpyxl has no single error type for unreadable files
        raise DecodeFailure(path, str(exc) or type(exc).__name__) from exc

    names: list[str] = []
    sheets: dict[str, list[list[Any]]] = {}
    try:
        for ws in wb.worksheets:
            matrix = [_trim_row(r) for r in ws.iter_rows(values_only=True)]
            # Drop trailing empty rows left behind by formatting
            while matrix and not matrix[-1]:
                matrix.pop()
            names.append(ws.title)
            sheets[ws.title] = matrix
    finally:
        wb.close()
    return names, sheets


def _coerce_csv_value(raw: str) -> Any:
    return CellValue.from_input(raw).to_raw()


def _decode_csv(path: Path) -> tuple[list[str], dict[str, list[list[Any]]]]:
    # Rows keep their own width; a later line longer than the first is not cut
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            rows = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise DecodeFailure(path, str(exc) or type(exc).__name__) from exc

    matrix = [_trim_row([_coerce_csv_value(v) for v in row]) for row in rows]
    while matrix and not matrix[-1]:
        matrix.pop()
    name = path.stem or "Sheet1"
    return [name], {name: matrix}


def decode_workbook(
    path: Path | str,
    *,
    max_rows: int | None = None,
    max_cols: int | None = None,
) -> DecodedWorkbook:
    """Decode a spreadsheet file into raw matrices.

    Args:
        path: ``.xlsx``/``.xlsm`` or ``.csv`` file.
        max_rows: Truncate each sheet to this many rows.
        max_cols: Truncate each row to this many columns.

    Raises:
        DecodeFailure: Missing file, unsupported extension, or parser error.
    """
    path = Path(path)
    if not path.is_file():
        raise DecodeFailure(path, "file not found")

    suffix = path.suffix.lower()
    if suffix in XLSX_SUFFIXES:
        names, sheets = _decode_xlsx(path)
    elif suffix in CSV_SUFFIXES:
        names, sheets = _decode_csv(path)
    else:
        raise DecodeFailure(path, f"unsupported file type {suffix or '(none)'!r}")

    if not names:
        raise DecodeFailure(path, "workbook has no worksheets")

    sheets = {name: _limit(m, max_rows, max_cols) for name, m in sheets.items()}
    logger.debug("decoded %s: %d sheet(s)", path, len(names))
    return DecodedWorkbook(source=str(path), sheet_names=names, sheets=sheets)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_csv(matrix: Sequence[Sequence[Any]]) -> str:
    """Encode a matrix as CSV text (no header row).

    Values are written in their cell text form, so ``3.0`` becomes ``3``
    and booleans become ``true``/``false``.
    """
    width = max((len(row) for row in matrix), default=0)
    if width == 0:
        return "\n" * len(matrix)
    columns = [f"column_{i}" for i in range(width)]
    data = {
        name: [
            CellValue.from_raw(row[i]).text or None if i < len(row) else None
            for row in matrix
        ]
        for i, name in enumerate(columns)
    }
    df = pl.DataFrame(data, schema={name: pl.String for name in columns})
    return df.write_csv(include_header=False)


def encode_xlsx(
    matrix: Sequence[Sequence[Any]],
    path: Path | str,
    sheet_name: str = "Sheet1",
) -> Path:
    """Write a matrix to a single-sheet ``.xlsx`` file.

    Returns:
        The written path.
    """
    path = Path(path)
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]  # Excel's sheet-title limit
    for row in matrix:
        ws.append([None if v == "" else v for v in row])
    wb.save(str(path))
    return path
