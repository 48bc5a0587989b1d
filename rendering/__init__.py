"""Line styles, legend layout, and Plotly payload construction."""

from .figure import export_filename, export_image, to_figure, write_html
from .plot_request import PlotRequest, build_plot_request
from .styles import LINE_STYLES, LegendEntry, LegendLayout, compute_legend, default_style

__all__ = [
    "PlotRequest",
    "build_plot_request",
    "LINE_STYLES",
    "LegendEntry",
    "LegendLayout",
    "compute_legend",
    "default_style",
    "to_figure",
    "export_image",
    "export_filename",
    "write_html",
]
