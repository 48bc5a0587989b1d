"""
Delimited-text parsing for uploaded tables.

Wraps ``pandas.read_csv``: the first row is the header, blank lines are
skipped, and column values are typed dynamically (a column of numbers comes
back numeric, anything else keeps its text). Structural problems become a
``ParseError`` naming the file.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .errors import ParseError

logger = logging.getLogger("csv-plotter")

# Rejection reasons for tables that parse but cannot produce a series
INSUFFICIENT_COLUMNS = "insufficient_columns"
EMPTY_DATA = "empty_data"


@dataclass
class ParsedTable:
    """A parsed table: ordered header plus the typed rows.

    Attributes:
        file_name: Name of the file the text came from.
        columns: Header names in file order.
        frame: One DataFrame row per data row, columns in header order.
    """

    file_name: str
    columns: list[str]
    frame: pd.DataFrame

    @property
    def row_count(self) -> int:
        return len(self.frame)

    @property
    def rejection(self) -> Optional[str]:
        """Why this table yields no series, or None if it can produce some."""
        if len(self.columns) < 2:
            return INSUFFICIENT_COLUMNS
        if self.row_count == 0:
            return EMPTY_DATA
        return None


def _check_row_widths(text: str, file_name: str) -> None:
    """Raise ``ParseError`` if any data row has fewer fields than the header.

    ``read_csv`` pads short rows with missing values. Reading every cell as
    text with NA detection off makes empty cells come back as ``""``, so a
    missing value can only be padding.
    """
    try:
        raw = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.ParserError as e:
        raise ParseError(file_name, str(e).strip()) from e

    short = raw.isna().any(axis=1)
    if short.any():
        row = int(short.idxmax())
        saw = int(raw.iloc[row].notna().sum())
        raise ParseError(
            file_name,
            f"Expected {raw.shape[1]} fields in data row {row}, saw {saw}",
        )


def parse_table(text: str, file_name: str) -> ParsedTable:
    """Parse delimited text into a ``ParsedTable``.

    Args:
        text: Raw file content.
        file_name: Name used in error messages.

    Returns:
        ParsedTable with the header and typed rows. Tables with fewer than two
        columns or no data rows are returned too; check ``rejection``.

    Raises:
        ParseError: If the text is empty, has an unterminated quoted field, or
            a row has more or fewer fields than the header.
    """
    if not text or not text.strip():
        raise ParseError(file_name, "File contains no header row")

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as e:
        raise ParseError(file_name, str(e)) from e
    except pd.errors.ParserError as e:
        raise ParseError(file_name, str(e).strip()) from e

    # pandas silently turns the first column into the index when the data
    # rows carry one field more than the header
    if len(frame) > 0 and not isinstance(frame.index, pd.RangeIndex):
        raise ParseError(
            file_name,
            f"Expected {len(frame.columns)} fields per row, "
            f"saw {len(frame.columns) + frame.index.nlevels}",
        )
    if len(frame) > 0:
        _check_row_widths(text, file_name)

    columns = [str(c) for c in frame.columns]
    frame.columns = columns
    logger.debug("Parsed %s: %d columns, %d rows", file_name, len(columns), len(frame))
    return ParsedTable(file_name=file_name, columns=columns, frame=frame)
