"""Command-line interface for sheetgrid."""

from __future__ import annotations

import json
from pathlib import Path

import click

from sheetgrid import __version__
from sheetgrid.addresses import make_addr, parse_column, parse_range
from sheetgrid.config import load_grid_config
from sheetgrid.controller import SheetController
from sheetgrid.errors import DecodeFailure, GridError
from sheetgrid.logging import set_log_dir


@click.group()
@click.version_option(version=__version__, prog_name="sheetgrid")
@click.option("--log-dir", type=click.Path(file_okay=False), default=None, help="Write NDJSON events to this directory.")
@click.pass_context
def main(ctx: click.Context, log_dir: str | None) -> None:
    """sheetgrid -- inspect, search, sort and copy spreadsheet data."""
    ctx.ensure_object(dict)
    ctx.obj["log_dir"] = log_dir


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _config_for(path: Path) -> dict:
    """Load the grid config beside *path* and attach the event sink if requested."""
    try:
        config = load_grid_config(path.parent)
    except ValueError as e:
        raise click.ClickException(str(e))
    log_dir = (click.get_current_context().obj or {}).get("log_dir")
    if log_dir:
        set_log_dir(Path(log_dir), fsync=bool(config.get("logging_fsync")))
    return config


def _open(file: str, sheet: str | None = None) -> SheetController:
    """Load FILE (config from its directory) and activate SHEET if given."""
    path = Path(file)
    ctl = SheetController(_config_for(path))
    try:
        ctl.load_file(path)
        if sheet:
            ctl.switch_sheet(sheet)
    except (DecodeFailure, GridError) as e:
        raise click.ClickException(str(e))
    return ctl


_sheet_option = click.option("--sheet", default=None, help="Sheet name (default: first sheet).")


# ---------------------------------------------------------------------------
# Info
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def info(file: str, as_json: bool) -> None:
    """List the sheets in FILE with their sizes."""
    ctl = _open(file)
    sheets = []
    for name in ctl.sheet_names:
        snap = ctl.switch_sheet(name)
        sheets.append({"name": name, "rows": snap.row_count, "cols": snap.max_cols})
    if as_json:
        click.echo(json.dumps(sheets, indent=2))
        return
    for s in sheets:
        click.echo(f"  {s['name']:20s} {s['rows']} rows x {s['cols']} cols")


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@_sheet_option
def search(file: str, query: str, sheet: str | None) -> None:
    """Print the address of every cell in FILE containing QUERY."""
    ctl = _open(file, sheet)
    snap = ctl.search(query)
    if not snap.search.matches:
        click.echo("No matches found.")
        return
    for row, col in snap.search.matches:
        click.echo(f"{make_addr(row, col)}\t{ctl.store.get(row, col).text}")


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("column")
@click.option("--desc", is_flag=True, help="Sort descending.")
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None, help="Write CSV here instead of stdout.")
@_sheet_option
def sort(file: str, column: str, desc: bool, output: str | None, sheet: str | None) -> None:
    """Sort FILE by COLUMN (letters or 0-based index) and emit CSV."""
    from sheetgrid.workbook_io import encode_csv

    ctl = _open(file, sheet)
    try:
        col = parse_column(column)
    except ValueError as e:
        raise click.ClickException(str(e))
    ctl.sort_by_column(col)
    if desc:
        ctl.sort_by_column(col)
    text = encode_csv(ctl.export_matrix())
    if output:
        Path(output).write_text(text)
        click.echo(f"Wrote {output}")
    else:
        click.echo(text, nl=False)


# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("cell_range")
@_sheet_option
def copy(file: str, cell_range: str, sheet: str | None) -> None:
    """Print CELL_RANGE (e.g. A1:C3) of FILE as tab-separated text."""
    ctl = _open(file, sheet)
    try:
        r0, c0, r1, c1 = parse_range(cell_range)
    except ValueError as e:
        raise click.ClickException(str(e))
    ctl.select_begin(r0, c0)
    ctl.select_extend(r1, c1)
    ctl.select_end()
    click.echo(ctl.copy_selection())


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), required=True, help="Target .csv or .xlsx file.")
@_sheet_option
def export(file: str, output: str, sheet: str | None) -> None:
    """Export one sheet of FILE to CSV or XLSX."""
    from sheetgrid.workbook_io import encode_csv, encode_xlsx

    ctl = _open(file, sheet)
    target = Path(output)
    suffix = target.suffix.lower()
    if suffix == ".csv":
        target.write_text(encode_csv(ctl.export_matrix()))
    elif suffix == ".xlsx":
        encode_xlsx(ctl.export_matrix(), target, sheet_name=ctl.active_sheet or "Sheet1")
    else:
        raise click.ClickException(f"Unsupported export type: {suffix or '(none)'!r}")
    click.echo(f"Exported {ctl.active_sheet} to {target}")


# ---------------------------------------------------------------------------
# Serve
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", default=8000, type=int, help="Port.")
def serve(file: str, host: str, port: int) -> None:
    """Serve FILE over the JSON command API."""
    import uvicorn

    from sheetgrid.ui.server import create_app

    path = Path(file)
    try:
        app = create_app(path, _config_for(path))
    except DecodeFailure as e:
        raise click.ClickException(str(e))

    click.echo(f"Serving at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")
    try:
        uvicorn.run(app, host=host, port=port, log_level="warning")
    except KeyboardInterrupt:
        click.echo("\nStopped.")
