"""Tests for the command-line entry point."""

import argparse
from unittest import mock

import pytest

import main


@pytest.fixture(autouse=True)
def no_log_setup():
    with mock.patch("main.setup_logging"):
        yield


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestParseStyleArg:
    def test_valid(self):
        assert main.parse_style_arg("a.csv=dot") == ("a.csv", "dot")

    def test_name_with_equals(self):
        assert main.parse_style_arg("x=1.csv=dash") == ("x=1.csv", "dash")

    def test_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError):
            main.parse_style_arg("a.csv")
        with pytest.raises(argparse.ArgumentTypeError):
            main.parse_style_arg("a.csv=wavy")


class TestMain:
    def test_prints_file_list(self, tmp_path, capsys):
        a = _write(tmp_path, "a.csv", "t,v\n0,1\n1,2\n")
        b = _write(tmp_path, "b.csv", "t,v,w\n0,1,2\n1,2,3\n")
        code = main.main([a, b, "--style", "b.csv=dot", "--hide", "a.csv"])
        out = capsys.readouterr().out
        assert code == 0
        assert "[ ] a.csv  Solid, 1 trace" in out
        assert "[x] b.csv  Dot, 2 traces" in out

    def test_skipped_file_reported(self, tmp_path, capsys):
        one = _write(tmp_path, "one.csv", "t\n1\n")
        code = main.main([one])
        out = capsys.readouterr().out
        assert code == 0
        assert "Skipped one.csv: insufficient columns" in out
        assert "No data to display." in out

    def test_parse_error_exit_code(self, tmp_path, capsys):
        bad = _write(tmp_path, "bad.csv", 't,a\n0,"open\n')
        code = main.main([bad])
        assert code == 1
        assert "Parsing error in bad.csv" in capsys.readouterr().err

    def test_unknown_file_in_hide(self, tmp_path, capsys):
        a = _write(tmp_path, "a.csv", "t,v\n0,1\n")
        code = main.main([a, "--hide", "zzz.csv"])
        assert code == 2
        assert "zzz.csv" in capsys.readouterr().err

    def test_html_output(self, tmp_path, capsys):
        a = _write(tmp_path, "a.csv", "t,v\n0,1\n1,2\n")
        html = tmp_path / "out" / "plot.html"
        code = main.main([a, "--html", str(html)])
        assert code == 0
        assert html.exists()

    def test_export(self, tmp_path):
        a = _write(tmp_path, "a.csv", "t,v\n0,1\n1,2\n")
        with mock.patch("main.PlotSession.export_image",
                        return_value={"status": "success", "filepath": "p.png"}) as export:
            code = main.main([a, "--export", str(tmp_path)])
        assert code == 0
        export.assert_called_once_with(str(tmp_path), format="png")
