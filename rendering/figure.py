"""
Plotly figure construction and export for a PlotRequest.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import plotly.graph_objects as go

import config

from .plot_request import PlotRequest

logger = logging.getLogger("csv-plotter")

_FALLBACK_NAME = "plot"


def to_figure(request: PlotRequest) -> go.Figure:
    """Build a Plotly figure from *request* (traces + layout)."""
    return go.Figure(data=request.data, layout=request.layout)


def export_filename(file_names: Iterable[str]) -> str:
    """Image file name (no extension) for the given plotted files.

    ``["a.csv", "b.csv"]`` -> ``"plot_a_b"``; no files -> ``"plot"``.
    """
    stems = [Path(name).stem for name in file_names]
    if not stems:
        return _FALLBACK_NAME
    return f"{_FALLBACK_NAME}_{'_'.join(stems)}"


def export_image(
    request: PlotRequest,
    filepath: str,
    format: str = "png",
    width: int | None = None,
    height: int | None = None,
) -> dict:
    """Export the plot to a raster/vector image file (PNG or PDF).

    Args:
        request: The plot to render.
        filepath: Output file path; the extension is added if missing.
        format: 'png' (default) or 'pdf'.
        width: Image width in px (default from config, 1200).
        height: Image height in px (default from config, 800).

    Returns:
        Result dict with status, filepath, and size_bytes.
    """
    if format not in ("png", "pdf"):
        return {"status": "error", "message": f"Unsupported export format '{format}'"}

    # Ensure correct extension
    if not filepath.endswith(f".{format}"):
        filepath += f".{format}"

    if request.is_empty:
        return {"status": "error",
                "message": "No plot to export. Select at least one file first."}

    filepath = str(Path(filepath).resolve())
    parent = Path(filepath).parent
    if parent and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)

    width = width or config.EXPORT_WIDTH
    height = height or config.EXPORT_HEIGHT
    logger.debug(f"Exporting {format.upper()} ({width}x{height}) to {filepath}...")
    try:
        to_figure(request).write_image(filepath, format=format, width=width, height=height)
    except Exception as e:
        return {"status": "error", "message": f"{format.upper()} export failed: {e}"}

    path_obj = Path(filepath)
    if path_obj.exists() and path_obj.stat().st_size > 0:
        return {
            "status": "success",
            "filepath": str(path_obj),
            "size_bytes": path_obj.stat().st_size,
        }
    return {"status": "error", "message": f"{format.upper()} file not created or is empty: {filepath}"}


def write_html(request: PlotRequest, filepath: str) -> dict:
    """Write the plot as a standalone interactive HTML page."""
    if request.is_empty:
        return {"status": "error",
                "message": "No plot to export. Select at least one file first."}
    path_obj = Path(filepath).resolve()
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    to_figure(request).write_html(str(path_obj), config=request.config, include_plotlyjs="cdn")
    return {"status": "success", "filepath": str(path_obj), "size_bytes": path_obj.stat().st_size}
