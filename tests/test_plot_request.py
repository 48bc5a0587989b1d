"""
Tests for rendering.plot_request and rendering.figure.

No network, no image export backend - fast and self-contained.
"""

import json
from unittest import mock

import numpy as np
import plotly.graph_objects as go
import pytest

from data_ops.store import FileRecord, Series
from rendering.figure import export_filename, export_image, to_figure, write_html
from rendering.plot_request import PLOT_CONFIG, PlotRequest, build_plot_request


def _record(name, columns=("a", "b"), n=5, style="solid", x_column="time"):
    x = np.arange(n, dtype=float)
    series = [
        Series(name=f"{c}({name})", column=c, x_column=x_column, file_name=name,
               x=x, y=np.linspace(0, 1, n) + k)
        for k, c in enumerate(columns)
    ]
    return FileRecord(file_name=name, series=series, style=style)


class TestBuildPlotRequest:
    def test_empty(self):
        request = build_plot_request([])
        assert request.is_empty
        assert request.data == []
        assert request.layout == {}

    def test_traces_flattened_in_record_order(self):
        request = build_plot_request([
            _record("A.csv", style="dash"),
            _record("B.csv", columns=("c",), style="dot"),
        ])
        assert request.trace_names == ["a(A.csv)", "b(A.csv)", "c(B.csv)"]
        assert [t["line"]["dash"] for t in request.data] == ["dash", "dash", "dot"]
        assert all(t["mode"] == "lines" for t in request.data)
        assert request.data[2]["meta"] == {"file": "B.csv", "x_header": "time", "y_header": "c"}

    def test_nan_becomes_gap(self):
        record = _record("A.csv", columns=("a",), n=3)
        record.series[0] = Series(name="a(A.csv)", column="a", x_column="t", file_name="A.csv",
                                  x=[0.0, 1.0, 2.0], y=[1.0, float("nan"), 3.0])
        request = build_plot_request([record])
        assert request.data[0]["y"] == [1.0, None, 3.0]
        json.dumps(request.to_dict())

    def test_default_axis_titles(self):
        layout = build_plot_request([_record("A.csv", x_column="freq")]).layout
        assert layout["xaxis"]["title"]["text"] == "<b>freq</b>"
        assert layout["yaxis"]["title"]["text"] == "<b>Value</b>"

    def test_axis_title_overrides(self):
        layout = build_plot_request([_record("A.csv")], x_title="Frequency (GHz)",
                                    y_title="S21 (dB)").layout
        assert layout["xaxis"]["title"]["text"] == "<b>Frequency (GHz)</b>"
        assert layout["yaxis"]["title"]["text"] == "<b>S21 (dB)</b>"

    def test_empty_override_falls_back(self):
        layout = build_plot_request([_record("A.csv")], x_title="", y_title="").layout
        assert layout["xaxis"]["title"]["text"] == "<b>time</b>"

    def test_layout_fixed_options(self):
        layout = build_plot_request([_record("A.csv"), _record("B.csv")]).layout
        assert layout["title"]["text"] == "<b>Plot of A.csv, B.csv</b>"
        assert layout["hovermode"] == "x unified"
        assert layout["margin"] == {"t": 60, "l": 70, "r": 250, "b": 60}
        assert layout["legend"]["y"] == pytest.approx(0.84)
        assert len(layout["shapes"]) == 2
        assert len(layout["annotations"]) == 3

    def test_config(self):
        request = build_plot_request([_record("A.csv")])
        assert request.config == PLOT_CONFIG
        assert "select2d" in request.config["modeBarButtonsToRemove"]
        assert "lasso2d" in request.config["modeBarButtonsToRemove"]
        assert request.config["responsive"] is True

    def test_deterministic(self):
        records = [_record("A.csv"), _record("B.csv", style="dashdot")]
        assert build_plot_request(records, "x", "y") == build_plot_request(records, "x", "y")

    def test_style_change_changes_request(self):
        record = _record("A.csv")
        before = build_plot_request([record])
        record.style = "dot"
        after = build_plot_request([record])
        assert before != after
        assert after.data[0]["line"]["dash"] == "dot"
        assert after.data[0]["y"] == before.data[0]["y"]


class TestFigure:
    def test_to_figure(self):
        fig = to_figure(build_plot_request([_record("A.csv")]))
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 2
        assert fig.data[0].line.dash == "solid"
        assert fig.layout.hovermode == "x unified"

    def test_to_figure_empty(self):
        fig = to_figure(PlotRequest())
        assert len(fig.data) == 0


class TestExportFilename:
    def test_joined_stems(self):
        assert export_filename(["a.csv", "b.csv"]) == "plot_a_b"

    def test_fallback(self):
        assert export_filename([]) == "plot"

    def test_other_extensions(self):
        assert export_filename(["run.tsv"]) == "plot_run"


class TestExport:
    def test_export_empty_plot_is_error(self, tmp_path):
        result = export_image(PlotRequest(), str(tmp_path / "out.png"))
        assert result["status"] == "error"

    def test_unsupported_format(self, tmp_path):
        request = build_plot_request([_record("A.csv")])
        result = export_image(request, str(tmp_path / "out"), format="gif")
        assert result["status"] == "error"

    def test_export_png_uses_fixed_size(self, tmp_path):
        request = build_plot_request([_record("A.csv")])

        def fake_write(self, path, format=None, width=None, height=None):
            with open(path, "wb") as f:
                f.write(b"\x89PNG fake")

        with mock.patch.object(go.Figure, "write_image", autospec=True, side_effect=fake_write) as write:
            result = export_image(request, str(tmp_path / "sub" / "plot_A"))
        assert result["status"] == "success"
        assert result["filepath"].endswith("plot_A.png")
        assert result["size_bytes"] > 0
        kwargs = write.call_args.kwargs
        assert (kwargs["width"], kwargs["height"]) == (1200, 800)

    def test_export_backend_failure(self, tmp_path):
        request = build_plot_request([_record("A.csv")])
        with mock.patch.object(go.Figure, "write_image", side_effect=RuntimeError("no kaleido")):
            result = export_image(request, str(tmp_path / "p.png"))
        assert result["status"] == "error"
        assert "no kaleido" in result["message"]

    def test_write_html(self, tmp_path):
        request = build_plot_request([_record("A.csv")])
        result = write_html(request, str(tmp_path / "plot.html"))
        assert result["status"] == "success"
        text = (tmp_path / "plot.html").read_text(encoding="utf-8")
        assert "<html" in text.lower()
        assert "a(A.csv)" in text
