"""FastAPI server exposing the grid command surface over JSON.

Routes are thin wrappers over a module-level :class:`SheetController`.
Every command route returns the resulting grid snapshot.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from sheetgrid.controller import GridSnapshot, SheetController
from sheetgrid.errors import DecodeFailure, EngineBusy, GridError, UnknownSheet
from sheetgrid.logging import get_sink
from sheetgrid.workbook_io import encode_csv

# The singleton controller is set at startup by ``create_app()``.
_controller: SheetController | None = None


def create_app(source: Path | None = None, config: dict[str, Any] | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        source: Optional spreadsheet file to load at startup.
        config: Grid configuration overrides.

    Returns:
        Configured FastAPI instance.
    """
    global _controller
    _controller = SheetController(config)
    if source is not None:
        _controller.load_file(source)

    from sheetgrid import __version__

    app = FastAPI(title="sheetgrid", version=__version__)
    app.include_router(_api_router())
    return app


def _ctl() -> SheetController:
    """Get the singleton controller, raising if not initialised."""
    if _controller is None:
        raise HTTPException(500, "Controller not initialised")
    return _controller


def _run(command: Callable[..., GridSnapshot], *args: Any, **kwargs: Any) -> dict[str, Any]:
    """Run a controller command, mapping engine errors to HTTP errors."""
    try:
        return command(*args, **kwargs).model_dump(mode="json")
    except UnknownSheet as exc:
        raise HTTPException(404, str(exc))
    except EngineBusy as exc:
        raise HTTPException(409, str(exc))
    except DecodeFailure as exc:
        raise HTTPException(422, str(exc))
    except (GridError, ValueError) as exc:
        raise HTTPException(400, str(exc))


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoadRequest(BaseModel):
    path: str


class SwitchSheetRequest(BaseModel):
    name: str


class CellRequest(BaseModel):
    row: int
    col: int


class SelectBeginRequest(BaseModel):
    row: int
    col: int
    extend: bool = False


class FocusRequest(BaseModel):
    d_row: int = 0
    d_col: int = 0
    extend: bool = False


class EditStartRequest(BaseModel):
    row: int | None = None
    col: int | None = None
    initial_value: Any = None


class DraftRequest(BaseModel):
    value: Any = None


class ResizeRequest(BaseModel):
    index: int
    delta: int


class InsertRequest(BaseModel):
    after_index: int


class DeleteRequest(BaseModel):
    index: int


class SortRequest(BaseModel):
    col: int


class SearchRequest(BaseModel):
    query: str


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


def _api_router() -> APIRouter:
    router = APIRouter(prefix="/api")

    # -- State & loading --

    @router.get("/state")
    async def get_state() -> dict[str, Any]:
        return _run(_ctl().snapshot)

    @router.post("/load")
    async def load(req: LoadRequest) -> dict[str, Any]:
        return _run(_ctl().load_file, Path(req.path))

    @router.post("/sheets/switch")
    async def switch_sheet(req: SwitchSheetRequest) -> dict[str, Any]:
        return _run(_ctl().switch_sheet, req.name)

    # -- Selection --

    @router.post("/select/begin")
    async def select_begin(req: SelectBeginRequest) -> dict[str, Any]:
        return _run(_ctl().select_begin, req.row, req.col, req.extend)

    @router.post("/select/extend")
    async def select_extend(req: CellRequest) -> dict[str, Any]:
        return _run(_ctl().select_extend, req.row, req.col)

    @router.post("/select/end")
    async def select_end() -> dict[str, Any]:
        return _run(_ctl().select_end)

    @router.post("/focus")
    async def move_focus(req: FocusRequest) -> dict[str, Any]:
        return _run(_ctl().move_focus, req.d_row, req.d_col, req.extend)

    @router.post("/escape")
    async def escape() -> dict[str, Any]:
        return _run(_ctl().escape)

    # -- Editing --

    @router.post("/edit/start")
    async def start_edit(req: EditStartRequest) -> dict[str, Any]:
        return _run(_ctl().start_edit, req.row, req.col, req.initial_value)

    @router.post("/edit/draft")
    async def set_draft(req: DraftRequest) -> dict[str, Any]:
        return _run(_ctl().set_draft, req.value)

    @router.post("/edit/commit")
    async def commit_edit() -> dict[str, Any]:
        return _run(_ctl().commit_edit)

    @router.post("/edit/cancel")
    async def cancel_edit() -> dict[str, Any]:
        return _run(_ctl().cancel_edit)

    # -- Resize --

    @router.post("/resize/column")
    async def resize_column(req: ResizeRequest) -> dict[str, Any]:
        return _run(_ctl().resize_column, req.index, req.delta)

    @router.post("/resize/row")
    async def resize_row(req: ResizeRequest) -> dict[str, Any]:
        return _run(_ctl().resize_row, req.index, req.delta)

    # -- Row/column insert & delete --

    @router.post("/rows/insert")
    async def insert_row(req: InsertRequest) -> dict[str, Any]:
        return _run(_ctl().insert_row, req.after_index)

    @router.post("/rows/delete")
    async def delete_row(req: DeleteRequest) -> dict[str, Any]:
        return _run(_ctl().delete_row, req.index)

    @router.post("/rows/delete-selected")
    async def delete_selected_rows() -> dict[str, Any]:
        return _run(_ctl().delete_selected_rows)

    @router.post("/cols/insert")
    async def insert_column(req: InsertRequest) -> dict[str, Any]:
        return _run(_ctl().insert_column, req.after_index)

    @router.post("/cols/delete")
    async def delete_column(req: DeleteRequest) -> dict[str, Any]:
        return _run(_ctl().delete_column, req.index)

    # -- Sort / search --

    @router.post("/sort")
    async def sort(req: SortRequest) -> dict[str, Any]:
        return _run(_ctl().sort_by_column, req.col)

    @router.post("/search")
    async def search(req: SearchRequest) -> dict[str, Any]:
        return _run(_ctl().search, req.query)

    @router.post("/search/next")
    async def search_next() -> dict[str, Any]:
        return _run(_ctl().search_next)

    # -- Copy / export / stats --

    @router.get("/copy", response_class=PlainTextResponse)
    async def copy_selection() -> str:
        return _ctl().copy_selection()

    @router.get("/stats")
    async def selection_stats() -> dict[str, Any] | None:
        stats = _ctl().selection_stats()
        return stats.model_dump() if stats is not None else None

    @router.get("/export.csv", response_class=PlainTextResponse)
    async def export_csv() -> str:
        return encode_csv(_ctl().export_matrix())

    # -- Events --

    @router.get("/events")
    async def get_events(
        level: str | None = Query(None),
        event_type: str | None = Query(None),
        limit: int = Query(200, ge=1, le=2000),
    ) -> list[dict[str, Any]]:
        sink = get_sink()
        if sink is None:
            return []
        return sink.read_events(level=level, event_type=event_type, limit=limit)

    return router
