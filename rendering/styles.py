"""
Per-file line styles and the custom "File Styles" legend.

Every file gets a dash style from a fixed palette, picked round-robin by its
registration position, so a file keeps its style no matter which files are
shown. The legend lists the selected files in registry order in a column to
the right of the plot; Plotly's own per-trace legend is pushed down below it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from data_ops.store import FileRecord

LINE_STYLES = ("solid", "dash", "dot", "dashdot", "longdash", "longdashdot")

# Paper-coordinate geometry of the custom legend
LEGEND_TOP = 1.0          # y of the first file slot
ROW_HEIGHT = 0.08         # vertical distance between slots
TITLE_SLOT_Y = 1.08       # y of the "File Styles" header
HEADER_HEIGHT = 0.08
DEFAULT_LEGEND_Y = 1.0    # Plotly legend top when no custom legend is drawn
LEGEND_X = 1.02
SWATCH_END_X = 1.07
LABEL_X = 1.08

_MAX_NAME_LENGTH = 20
_TRUNCATED_LENGTH = 17

_LEGEND_LINE_COLOR = "#1f2937"
_LEGEND_TEXT_COLOR = "#374151"


def default_style(position: int) -> str:
    """Style for the file registered at *position* (0-based)."""
    return LINE_STYLES[position % len(LINE_STYLES)]


def validate_style(style: str) -> str:
    """Return *style* if it is in the palette.

    Raises:
        ValueError: For an unknown style name.
    """
    if style not in LINE_STYLES:
        raise ValueError(f"Unknown line style '{style}'. Choose from {list(LINE_STYLES)}")
    return style


def style_label(style: str) -> str:
    """Human-readable style name: 'dashdot' -> 'Dashdot'."""
    return style[:1].upper() + style[1:]


def truncate_name(name: str) -> str:
    """Elide file names longer than the legend column allows."""
    if len(name) <= _MAX_NAME_LENGTH:
        return name
    return name[:_TRUNCATED_LENGTH] + "..."


@dataclass(frozen=True)
class LegendEntry:
    """One row of the custom legend."""

    slot: int
    y: float
    file_name: str
    label: str
    style: str
    trace_count: int


@dataclass(frozen=True)
class LegendLayout:
    """Custom legend rows plus where Plotly's own legend should start."""

    entries: tuple[LegendEntry, ...] = field(default_factory=tuple)
    default_legend_y: float = DEFAULT_LEGEND_Y

    def shapes(self) -> list[dict]:
        """Line swatches drawn in paper coordinates, one per entry."""
        return [
            {
                "type": "line", "xref": "paper", "yref": "paper",
                "x0": LEGEND_X, "y0": e.y, "x1": SWATCH_END_X, "y1": e.y,
                "line": {"color": _LEGEND_LINE_COLOR, "width": 2, "dash": e.style},
            }
            for e in self.entries
        ]

    def annotations(self) -> list[dict]:
        """Entry labels, followed by the column header when there are entries."""
        notes = [
            {
                "xref": "paper", "yref": "paper",
                "x": LABEL_X, "y": e.y,
                "text": e.label,
                "showarrow": False, "xanchor": "left", "yanchor": "middle",
                "font": {"size": 12, "color": _LEGEND_TEXT_COLOR},
            }
            for e in self.entries
        ]
        if self.entries:
            notes.append({
                "xref": "paper", "yref": "paper", "x": LEGEND_X, "y": TITLE_SLOT_Y,
                "text": "<b>File Styles</b>", "showarrow": False, "xanchor": "left",
            })
        return notes


def legend_label(record: FileRecord) -> str:
    """Legend text: bold file name, style and trace count."""
    count = record.trace_count
    trace_text = f", {count} trace{'s' if count > 1 else ''}" if count > 0 else ""
    return f"<b>{truncate_name(record.file_name)}</b> ({style_label(record.style)}{trace_text})"


def compute_legend(records: Sequence[FileRecord]) -> LegendLayout:
    """Lay out the custom legend for the selected *records* (registry order)."""
    if not records:
        return LegendLayout()
    entries = tuple(
        LegendEntry(
            slot=i,
            y=LEGEND_TOP - i * ROW_HEIGHT,
            file_name=record.file_name,
            label=legend_label(record),
            style=record.style,
            trace_count=record.trace_count,
        )
        for i, record in enumerate(records)
    )
    offset = TITLE_SLOT_Y - (len(records) * ROW_HEIGHT + HEADER_HEIGHT)
    return LegendLayout(entries=entries, default_legend_y=offset)
