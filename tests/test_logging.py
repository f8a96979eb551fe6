"""Tests for the sheetgrid structured event logging system."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    return tmp_path / "logs"


@pytest.fixture
def sink(log_dir: Path):
    from sheetgrid.logging.sink import EventSink

    return EventSink(log_dir)


@pytest.fixture
def attached(log_dir: Path):
    """Attach the module-level sink for the duration of a test."""
    from sheetgrid.logging import get_sink, set_log_dir

    set_log_dir(log_dir)
    yield get_sink()
    set_log_dir(None)


# ---------------------------------------------------------------------------
# A) Event schema
# ---------------------------------------------------------------------------


class TestGridEvent:
    def test_event_defaults(self):
        from sheetgrid.logging.events import EventLevel, EventType, GridEvent

        evt = GridEvent(
            level=EventLevel.info,
            event_type=EventType.sheet_loaded,
            message="hello",
        )
        assert evt.schema_version == 1
        assert evt.ts.endswith("Z")
        assert evt.level == "info"
        assert evt.event_type == "sheet_loaded"
        assert evt.context == {}
        assert evt.error_code is None

    def test_all_event_types_exist(self):
        from sheetgrid.logging.events import EventType

        expected = {
            "sheet_loaded", "sheet_load_failed", "sheet_switched",
            "cell_committed",
            "sort_applied", "search_completed", "search_no_match",
            "structure_changed", "mutation_refused",
            "selection_copied",
        }
        assert {e.value for e in EventType} == expected

    def test_error_codes_are_strings(self):
        from sheetgrid.logging import events

        for code in (events.DECODE_FAILED, events.LAST_TRACK_PROTECTED, events.INDEX_OUT_OF_RANGE):
            assert isinstance(code, str)
            assert len(code) > 0

    def test_truncate_context(self):
        from sheetgrid.logging import truncate_context

        out = truncate_context({"q": "x" * 300, "nested": {"v": "y" * 300}, "n": 5})
        assert out["q"].endswith("...[truncated]")
        assert len(out["q"]) == 256 + len("...[truncated]")
        assert out["nested"]["v"].endswith("...[truncated]")
        assert out["n"] == 5


# ---------------------------------------------------------------------------
# B) Filesystem NDJSON sink
# ---------------------------------------------------------------------------


class TestEventSink:
    def test_write_creates_log(self, sink, log_dir):
        from sheetgrid.logging.events import EventLevel, EventType, GridEvent

        sink.write(GridEvent(level=EventLevel.info, event_type=EventType.sheet_loaded, message="loaded"))

        assert sink.path == log_dir / "events.ndjson"
        lines = sink.path.read_text().strip().splitlines()
        assert len(lines) == 1
        parsed = json.loads(lines[0])
        assert parsed["message"] == "loaded"
        assert list(parsed) == sorted(parsed)

    def test_read_events_newest_first_and_filtered(self, sink):
        from sheetgrid.logging.events import EventLevel, EventType, GridEvent

        sink.write(GridEvent(level=EventLevel.info, event_type=EventType.sort_applied, message="one"))
        sink.write(GridEvent(level=EventLevel.warning, event_type=EventType.mutation_refused, message="two"))
        sink.write(GridEvent(level=EventLevel.info, event_type=EventType.sort_applied, message="three"))

        assert [e["message"] for e in sink.read_events()] == ["three", "two", "one"]
        assert [e["message"] for e in sink.read_events(level="warning")] == ["two"]
        assert [e["message"] for e in sink.read_events(event_type="sort_applied", limit=1)] == ["three"]

    def test_read_skips_garbage_lines(self, sink):
        sink.path.write_text('{"message": "ok"}\nnot json\n\n')
        assert sink.read_events() == [{"message": "ok"}]

    def test_read_missing_file(self, sink):
        assert sink.read_events() == []

    def test_tail_read_drops_partial_line(self, log_dir):
        from sheetgrid.logging.sink import EventSink

        small = EventSink(log_dir, tail_bytes=40)
        small.path.write_text(
            json.dumps({"message": "a" * 30}) + "\n" + json.dumps({"message": "b"}) + "\n"
        )
        assert small.read_events() == [{"message": "b"}]


# ---------------------------------------------------------------------------
# C) Emit helpers
# ---------------------------------------------------------------------------


class TestEmit:
    def test_emit_without_sink_is_noop(self):
        from sheetgrid.logging import EventType, emit_info, get_sink, set_log_dir

        set_log_dir(None)
        assert get_sink() is None
        emit_info(EventType.sheet_loaded, "discarded")

    def test_emit_levels(self, attached):
        from sheetgrid.logging import EventType, emit_error, emit_info, emit_warning

        emit_info(EventType.sheet_loaded, "i", {"sheet": "S"})
        emit_warning(EventType.mutation_refused, "w", error_code="last_track_protected")
        emit_error(EventType.sheet_load_failed, "e", error_code="decode_failed")

        events = attached.read_events()
        assert [e["level"] for e in events] == ["error", "warning", "info"]
        assert events[0]["error_code"] == "decode_failed"
        assert events[2]["context"] == {"sheet": "S"}

    def test_emit_truncates_context(self, attached):
        from sheetgrid.logging import EventType, emit_info

        emit_info(EventType.search_completed, "found", {"query": "q" * 1000})
        assert attached.read_events()[0]["context"]["query"].endswith("...[truncated]")

    def test_emit_never_raises(self, attached, monkeypatch):
        from sheetgrid.logging import EventType, emit_info

        def boom(event):
            raise OSError("disk full")

        monkeypatch.setattr(attached, "write", boom)
        emit_info(EventType.sheet_loaded, "still fine")


# ---------------------------------------------------------------------------
# D) Controller integration
# ---------------------------------------------------------------------------


class TestControllerEvents:
    def test_commands_emit_events(self, attached):
        from sheetgrid.controller import SheetController

        ctl = SheetController()
        ctl.load_sheet([["b", 2], ["a", 1]], name="Data")
        ctl.sort_by_column(0)
        ctl.search("zzz")
        ctl.delete_column(5)
        ctl.insert_row(-1)

        types = [e["event_type"] for e in reversed(attached.read_events())]
        assert types == [
            "sheet_loaded",
            "sort_applied",
            "search_no_match",
            "mutation_refused",
            "structure_changed",
        ]

    def test_refusal_codes(self, attached):
        from sheetgrid.controller import SheetController

        ctl = SheetController()
        ctl.load_sheet([["only"]])
        ctl.delete_row(0)
        ctl.delete_row(3)
        ctl.insert_column(4)

        refused = attached.read_events(event_type="mutation_refused")
        assert [e["error_code"] for e in reversed(refused)] == [
            "last_track_protected",
            "last_track_protected",
            "index_out_of_range",
        ]

    def test_failed_load_logged(self, attached, tmp_path):
        from sheetgrid.controller import SheetController
        from sheetgrid.errors import DecodeFailure

        ctl = SheetController()
        with pytest.raises(DecodeFailure):
            ctl.load_file(tmp_path / "absent.xlsx")
        (event,) = attached.read_events(level="error")
        assert event["event_type"] == "sheet_load_failed"
        assert event["error_code"] == "decode_failed"
        assert event["context"]["source"].endswith("absent.xlsx")

    def test_copy_logged(self, attached):
        from sheetgrid.controller import SheetController

        ctl = SheetController()
        ctl.load_sheet([["a", "b"], ["c", "d"]])
        ctl.select_begin(0, 0)
        ctl.select_extend(1, 1)
        ctl.copy_selection()
        (event,) = attached.read_events(event_type="selection_copied")
        assert event["context"]["rows"] == 2
        assert event["context"]["cols"] == 2
