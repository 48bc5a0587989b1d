"""
Build the render-ready Plotly payload from the selected file records.

``build_plot_request`` is a pure function: the same records, styles and axis
titles always give an equal PlotRequest, so callers can compare requests to
skip redundant re-renders.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from data_ops.store import FileRecord, Series

from .styles import compute_legend

_LINE_WIDTH = 2
_DEFAULT_X_TITLE = "X-Axis"
_DEFAULT_Y_TITLE = "Value"
_TEXT_COLOR = "#1f2937"
_AXIS_TITLE_COLOR = "#374151"
_GRID_COLOR = "#e2e8f0"
_TICK_COLOR = "#718096"

# Right margin leaves room for the custom legend column
MARGINS = {"t": 60, "l": 70, "r": 250, "b": 60}

PLOT_CONFIG = {
    "responsive": True,
    "scrollZoom": True,
    "displaylogo": False,
    "modeBarButtonsToRemove": ["select2d", "lasso2d"],
}


@dataclass(frozen=True)
class PlotRequest:
    """Plotly figure payload: traces, layout and display config."""

    data: list[dict] = field(default_factory=list)
    layout: dict = field(default_factory=dict)
    config: dict = field(default_factory=lambda: dict(PLOT_CONFIG))

    @property
    def is_empty(self) -> bool:
        return not self.data

    @property
    def trace_names(self) -> list[str]:
        return [t["name"] for t in self.data]

    def to_dict(self) -> dict:
        return {"data": self.data, "layout": self.layout, "config": self.config}


def _plain(values: np.ndarray) -> list:
    """Convert an array to a JSON-ready list; NaN becomes None (a line gap)."""
    out = []
    for v in values.tolist():
        if v is None or (isinstance(v, float) and not math.isfinite(v)):
            out.append(None)
        else:
            out.append(v)
    return out


def series_trace(series: Series, style: str) -> dict:
    """Plotly scatter trace for one series drawn with *style*."""
    return {
        "type": "scatter",
        "mode": "lines",
        "name": series.name,
        "x": _plain(series.x),
        "y": _plain(series.y),
        "line": {"width": _LINE_WIDTH, "dash": style},
        "meta": {
            "file": series.file_name,
            "x_header": series.x_column,
            "y_header": series.column,
        },
    }


def _axis(title: str) -> dict:
    return {
        "title": {"text": f"<b>{title}</b>", "font": {"size": 14, "color": _AXIS_TITLE_COLOR}},
        "gridcolor": _GRID_COLOR,
        "tickfont": {"color": _TICK_COLOR},
    }


def build_plot_request(
    records: Sequence[FileRecord],
    x_title: str = "",
    y_title: str = "",
) -> PlotRequest:
    """Materialize the plot for the selected *records* (registry order).

    Args:
        records: Selected file records, in registry order.
        x_title: X-axis title override; empty uses the first series' abscissa header.
        y_title: Y-axis title override; empty uses "Value".

    Returns:
        PlotRequest; empty (no traces, empty layout) when nothing is plotted.
    """
    data = [
        series_trace(series, record.style)
        for record in records
        for series in record.series
    ]
    if not data:
        return PlotRequest()

    plotted = [r for r in records if r.series]
    legend = compute_legend(plotted)
    first_x_header = data[0]["meta"]["x_header"]

    layout = {
        "title": {
            "text": f"<b>Plot of {', '.join(r.file_name for r in plotted)}</b>",
            "font": {"size": 20, "color": _TEXT_COLOR},
        },
        "xaxis": _axis(x_title or first_x_header or _DEFAULT_X_TITLE),
        "yaxis": _axis(y_title or _DEFAULT_Y_TITLE),
        "margin": dict(MARGINS),
        "hovermode": "x unified",
        "showlegend": True,
        "legend": {
            "x": 1.02,
            "y": legend.default_legend_y,
            "xanchor": "left",
            "yanchor": "top",
            "bgcolor": "rgba(255,255,255,0.6)",
            "bordercolor": _GRID_COLOR,
            "borderwidth": 1,
        },
        "plot_bgcolor": "white",
        "paper_bgcolor": "white",
        "shapes": legend.shapes(),
        "annotations": legend.annotations(),
    }
    return PlotRequest(data=data, layout=layout)
