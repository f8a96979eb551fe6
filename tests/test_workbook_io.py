"""Tests for the xlsx/csv decoder and encoder adapters."""

from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from sheetgrid.errors import DecodeFailure
from sheetgrid.workbook_io import decode_workbook, encode_csv, encode_xlsx


@pytest.fixture
def xlsx_path(tmp_path: Path) -> Path:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Revenue"
    ws.append(["region", "q1", "active"])
    ws.append(["north", 100, True])
    ws.append(["south", 2.5])
    notes = wb.create_sheet("Notes")
    notes["A1"] = "hello"
    notes["C2"] = "far"
    path = tmp_path / "book.xlsx"
    wb.save(str(path))
    return path


# ────────────────────────────────────────────────────────────────
# XLSX
# ────────────────────────────────────────────────────────────────


class TestDecodeXlsx:
    def test_sheet_order(self, xlsx_path: Path) -> None:
        decoded = decode_workbook(xlsx_path)
        assert decoded.sheet_names == ["Revenue", "Notes"]
        assert decoded.source == str(xlsx_path)

    def test_values_keep_types(self, xlsx_path: Path) -> None:
        m = decode_workbook(xlsx_path).sheets["Revenue"]
        assert m[0] == ["region", "q1", "active"]
        assert m[1] == ["north", 100, True]

    def test_trailing_blanks_trimmed(self, xlsx_path: Path) -> None:
        sheets = decode_workbook(xlsx_path).sheets
        assert sheets["Revenue"][2] == ["south", 2.5]
        assert sheets["Notes"] == [["hello"], [None, None, "far"]]

    def test_limits(self, xlsx_path: Path) -> None:
        m = decode_workbook(xlsx_path, max_rows=2, max_cols=1).sheets["Revenue"]
        assert m == [["region"], ["north"]]

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(DecodeFailure) as exc:
            decode_workbook(path)
        assert exc.value.source == str(path)


# ────────────────────────────────────────────────────────────────
# CSV
# ────────────────────────────────────────────────────────────────


class TestDecodeCsv:
    def test_single_sheet_named_after_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sales.csv"
        path.write_text("item,amount\nwidget,12\ngadget,3.75\n")
        decoded = decode_workbook(path)
        assert decoded.sheet_names == ["sales"]
        assert decoded.sheets["sales"] == [["item", "amount"], ["widget", 12], ["gadget", 3.75]]

    def test_blank_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "gaps.csv"
        path.write_text("a,,c\nd,,\n")
        assert decode_workbook(path).sheets["gaps"] == [["a", None, "c"], ["d"]]

    def test_longer_later_rows_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "wide.csv"
        path.write_text("a,b\n1,2,3,4\nc\n")
        assert decode_workbook(path).sheets["wide"] == [["a", "b"], [1, 2, 3, 4], ["c"]]

    def test_quoted_fields_and_bom(self, tmp_path: Path) -> None:
        path = tmp_path / "quoted.csv"
        path.write_bytes(b"\xef\xbb\xbfname,note\n\"x, y\",\"two\nlines\"\n")
        assert decode_workbook(path).sheets["quoted"] == [["name", "note"], ["x, y", "two\nlines"]]

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin.csv"
        path.write_bytes(b"caf\xe9\n")
        with pytest.raises(DecodeFailure):
            decode_workbook(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("")
        assert decode_workbook(path).sheets["empty"] == []


class TestDecodeErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DecodeFailure, match="file not found"):
            decode_workbook(tmp_path / "nope.xlsx")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "data.ods"
        path.write_bytes(b"")
        with pytest.raises(DecodeFailure, match="unsupported file type"):
            decode_workbook(path)


# ────────────────────────────────────────────────────────────────
# Encoding
# ────────────────────────────────────────────────────────────────


class TestEncode:
    def test_encode_csv(self) -> None:
        text = encode_csv([["name", 3.0, True], ["x, y", None]])
        assert text.splitlines() == ["name,3,true", '"x, y",,']

    def test_encode_csv_empty(self) -> None:
        assert encode_csv([[]]) == "\n"

    def test_encode_xlsx(self, tmp_path: Path) -> None:
        path = encode_xlsx([["a", 1], ["b", None]], tmp_path / "out.xlsx", sheet_name="Data")
        wb = openpyxl.load_workbook(str(path))
        ws = wb["Data"]
        assert ws["A1"].value == "a"
        assert ws["B1"].value == 1
        assert ws["B2"].value is None

    def test_xlsx_roundtrip_through_decoder(self, tmp_path: Path) -> None:
        path = encode_xlsx([["k", "v"], ["one", 1]], tmp_path / "rt.xlsx")
        decoded = decode_workbook(path)
        assert decoded.sheet_names == ["Sheet1"]
        assert decoded.sheets["Sheet1"] == [["k", "v"], ["one", 1]]
