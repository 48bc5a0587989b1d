"""Tests for session.logging - handler setup and structured error logs."""

import logging
from unittest import mock

import pytest

from session import logging as plot_logging


@pytest.fixture
def logger(tmp_path):
    with mock.patch.object(plot_logging, "LOG_DIR", tmp_path / "logs"):
        yield plot_logging.setup_logging(verbose=False)
    for handler in list(logging.getLogger(plot_logging.LOGGER_NAME).handlers):
        handler.close()
    logging.getLogger(plot_logging.LOGGER_NAME).handlers.clear()


def _read_log(tmp_path):
    for handler in logging.getLogger(plot_logging.LOGGER_NAME).handlers:
        handler.flush()
    (log_file,) = (tmp_path / "logs").glob("plotter_*.log")
    return log_file.read_text(encoding="utf-8")


class TestSetupLogging:
    def test_creates_run_log_file(self, logger, tmp_path):
        assert logger.name == "csv-plotter"
        assert "Run started at" in _read_log(tmp_path)

    def test_console_level_follows_verbose(self, tmp_path):
        with mock.patch.object(plot_logging, "LOG_DIR", tmp_path / "logs"):
            quiet = plot_logging.setup_logging(verbose=False)
            levels = [h.level for h in quiet.handlers if type(h) is logging.StreamHandler]
            assert levels == [logging.WARNING]
            loud = plot_logging.setup_logging(verbose=True)
            levels = [h.level for h in loud.handlers if type(h) is logging.StreamHandler]
            assert levels == [logging.DEBUG]
        for handler in loud.handlers:
            handler.close()
        loud.handlers.clear()

    def test_clean_console_format_has_no_stream_handler(self, tmp_path):
        with mock.patch.object(plot_logging, "LOG_DIR", tmp_path / "logs"), \
                mock.patch("config.get", side_effect=lambda k, d=None: "clean" if k == "console_format" else d):
            logger = plot_logging.setup_logging()
        assert [type(h) for h in logger.handlers] == [logging.FileHandler]
        logger.handlers[0].close()
        logger.handlers.clear()

    def test_tag_written_to_file(self, logger, tmp_path):
        logger.info("files registered", extra=plot_logging.tagged("files_added"))
        assert "| files_added | files registered" in _read_log(tmp_path)


class TestLogError:
    def test_context_and_trace(self, logger, tmp_path):
        try:
            raise ValueError("bad row")
        except ValueError as e:
            plot_logging.log_error("Could not load a.csv", exc=e, context={"file": "a.csv"})
        text = _read_log(tmp_path)
        assert "Could not load a.csv" in text
        assert "  file: a.csv" in text
        assert "Exception type: ValueError" in text
        assert "Stack trace:" in text

    def test_without_exception(self, logger, tmp_path):
        plot_logging.log_error("plain failure")
        text = _read_log(tmp_path)
        assert "plain failure" in text
        assert "Exception type" not in text
