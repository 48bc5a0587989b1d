"""
Per-file error types raised while loading uploaded tables.

Every error names the file it belongs to so the session can surface it
without aborting the rest of the batch.
"""


class PlotterError(Exception):
    """Base class for per-file ingestion errors."""

    prefix = "Error"

    def __init__(self, file_name: str, detail: str):
        self.file_name = file_name
        self.detail = detail
        super().__init__(f"{self.prefix} in {file_name}: {detail}")


class ReadError(PlotterError):
    """The underlying file content could not be read."""

    prefix = "Read error"


class ParseError(PlotterError):
    """The text is not a well-formed delimited table."""

    prefix = "Parsing error"
