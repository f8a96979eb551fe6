"""Grid configuration: defaults merged with an optional ``sheetgrid.yaml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "sheetgrid.yaml"

DEFAULT_CONFIG = {
    "default_row_height": 28,
    "default_col_width": 100,
    "min_row_height": 20,
    "min_col_width": 50,
    "row_header_width": 50,
    "col_header_height": 28,
    "frozen_rows": 1,
    "frozen_columns": 1,
    "max_import_rows_per_sheet": None,  # unlimited
    "max_import_cols_per_sheet": None,  # unlimited
    "logging_fsync": False,
}


def _flatten_frozen_block(user_config: dict[str, Any]) -> dict[str, Any]:
    """Flatten a nested ``frozen:`` block into flat config keys.

    Supports::

        frozen:
          rows: 2
          columns: 1

    Maps to ``frozen_rows`` and ``frozen_columns``.
    """
    frozen = user_config.pop("frozen", None)
    if not isinstance(frozen, dict):
        return user_config
    if "rows" in frozen:
        user_config["frozen_rows"] = frozen["rows"]
    if "columns" in frozen:
        user_config["frozen_columns"] = frozen["columns"]
    return user_config


def load_grid_config(directory: Path | None = None) -> dict[str, Any]:
    """Load grid configuration from ``sheetgrid.yaml``, with defaults.

    Args:
        directory: Directory holding ``sheetgrid.yaml``.  ``None`` returns
            the defaults.

    Returns:
        Merged configuration dict.  Unknown keys are preserved.

    Raises:
        ValueError: If the YAML document is not a mapping.
    """
    config = dict(DEFAULT_CONFIG)
    if directory is None:
        return config
    config_path = Path(directory) / CONFIG_FILENAME
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{config_path} must contain a mapping")
        config.update(_flatten_frozen_block(user_config))
    return config
