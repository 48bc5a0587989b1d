"""
Settings for csv-plotter.

Values come from two optional JSON files, the project-root ``config.json``
with ``~/.csv-plotter/config.json`` overlaid on top, plus ``.env`` for
environment overrides. Example::

    {
      "downsampling": {"threshold": 5000, "target": 1000},
      "parallel_max_workers": 4,
      "export": {"width": 1200, "height": 800},
      "console_format": "simple",
      "data_dir": "~/plots"
    }
"""

import json
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

CONFIG_PATH = Path.home() / ".csv-plotter" / "config.json"
_LOCAL_CONFIG_PATH = Path(__file__).resolve().parent / "config.json"


def _read_layers(paths) -> dict:
    """Merge the top-level keys of each readable JSON file, later files winning."""
    merged: dict = {}
    for path in paths:
        if not path.exists():
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                layer = json.load(f)
        except (json.JSONDecodeError, OSError):
            continue
        if isinstance(layer, dict):
            merged.update(layer)
    return merged


_user_config: dict = _read_layers((_LOCAL_CONFIG_PATH, CONFIG_PATH))


def get(key: str, default=None):
    """Get a config value by dot-separated key. E.g. get('downsampling.threshold', 5000)"""
    val = _user_config
    for k in key.split("."):
        if not isinstance(val, dict):
            return default
        val = val.get(k)
    return val if val is not None else default


def int_setting(key: str, default: int, minimum: int = 0) -> int:
    """Read an integer setting, rejecting values that are not whole numbers >= *minimum*.

    Raises:
        ValueError: If the configured value is a bool, a non-integral number,
            text that is not an integer, or below *minimum*.
    """
    raw = get(key, default)
    if isinstance(raw, bool):
        raise ValueError(f"Config key '{key}' must be an integer, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Config key '{key}' must be an integer, got {raw!r}") from None
    if isinstance(raw, float) and value != raw:
        raise ValueError(f"Config key '{key}' must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"Config key '{key}' must be >= {minimum}, got {value}")
    return value


# ---- Data directory -----------------------------------------------------------
# Holds the per-run log files.
# Priority: CSV_PLOTTER_DIR env var > "data_dir" config key > ~/.csv-plotter

_data_dir: Optional[Path] = None


def get_data_dir() -> Path:
    """Return the resolved base data directory (cached after the first call)."""
    global _data_dir
    if _data_dir is None:
        configured = os.environ.get("CSV_PLOTTER_DIR") or get("data_dir")
        if configured:
            _data_dir = Path(configured).expanduser().resolve()
        else:
            _data_dir = Path.home() / ".csv-plotter"
    return _data_dir


def _reset_data_dir() -> None:
    """Reset the cached data directory (for testing only)."""
    global _data_dir
    _data_dir = None


# ---- Ingestion / rendering ----------------------------------------------------
# LTTB keeps the first and last points, so a reduced series needs at least two
DOWNSAMPLING_THRESHOLD = int_setting("downsampling.threshold", 5000, minimum=2)
DOWNSAMPLED_POINT_COUNT = int_setting("downsampling.target", 1000, minimum=2)
if DOWNSAMPLED_POINT_COUNT > DOWNSAMPLING_THRESHOLD:
    raise ValueError(
        f"downsampling.target ({DOWNSAMPLED_POINT_COUNT}) must not exceed "
        f"downsampling.threshold ({DOWNSAMPLING_THRESHOLD})"
    )
PARALLEL_MAX_WORKERS = int_setting("parallel_max_workers", 4, minimum=1)
EXPORT_WIDTH = int_setting("export.width", 1200, minimum=1)
EXPORT_HEIGHT = int_setting("export.height", 800, minimum=1)
