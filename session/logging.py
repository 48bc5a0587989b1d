"""
Logging configuration for csv-plotter.

Two destinations:
  - File: always DEBUG level, one file per run in <data_dir>/logs/
  - Console: DEBUG if --verbose, WARNING+ otherwise
  - Format: "timestamp | level | name | tag | message"
  - Config console_format options:
    - "simple" - (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "full"   - same structured format as the file handler
    - "clean"  - no console output at all (file logging still active)

Library modules log through ``logging.getLogger(LOGGER_NAME)`` and never
configure handlers themselves; only the entry point calls ``setup_logging``.
"""

import logging
import sys
import traceback
from datetime import datetime
from typing import Optional

import config

LOGGER_NAME = "csv-plotter"

# Log directory
LOG_DIR = config.get_data_dir() / "logs"


def tagged(tag: str) -> dict:
    """Return ``extra`` dict for logger calls: ``logger.info("...", extra=tagged("x"))``."""
    return {"log_tag": tag}


class _TagFilter(logging.Filter):
    """Guarantees every record carries a ``log_tag`` attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "log_tag"):
            record.log_tag = ""
        return True


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging for the plotter.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING+ only

    Returns:
        Configured logger instance
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    # Clear existing handlers (in case of re-init)
    logger.handlers.clear()
    logger.filters.clear()
    logger.addFilter(_TagFilter())

    # File handler - one log file per run
    run_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = LOG_DIR / f"plotter_{run_timestamp}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(log_tag)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    console_format = config.get("console_format", "simple")

    if console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        if console_format == "full":
            console_handler.setFormatter(file_format)
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)

    logger.info("=" * 60)
    logger.info(f"Run started at {datetime.now().isoformat()}")
    logger.info(f"Log file: {log_file}")

    return logger


def log_error(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
) -> None:
    """Log an error with full details, including the stack trace when available.

    Args:
        message: Error description
        exc: Optional exception to include details from
        context: Optional dict of additional context (file name, stage, etc.)
    """
    logger = logging.getLogger(LOGGER_NAME)

    lines = [message]

    if context:
        lines.append("Context:")
        for key, value in context.items():
            lines.append(f"  {key}: {value}")

    if exc:
        lines.append(f"Exception type: {type(exc).__name__}")
        lines.append(f"Exception message: {exc}")
        if exc.__traceback__ is not None:
            lines.append("Stack trace:")
            lines.append("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

    logger.error("\n".join(lines), extra=tagged("error"))
