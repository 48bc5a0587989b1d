"""
Batch ingestion of uploaded files.

Each file is read, parsed, split into series and downsampled in its own
worker. Results are collected as they complete and handed back in
submission order, so the caller can merge the whole batch in one step.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import config

from .downsample import downsample_series
from .errors import ParseError, PlotterError, ReadError
from .extract import extract_series
from .parser import parse_table
from .store import FileRecord

logger = logging.getLogger("csv-plotter")


@dataclass
class UploadedFile:
    """A file handed over by the upload widget or the command line.

    Either ``raw_text`` is given directly, or ``loader`` is called in the
    worker to fetch it (e.g. reading a path from disk).
    """

    name: str
    raw_text: Optional[str] = None
    loader: Optional[Callable[[], str]] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path, encoding: str = "utf-8") -> "UploadedFile":
        """Build an UploadedFile whose content is read from *path* on demand."""
        path = Path(path)
        return cls(name=path.name, loader=lambda: path.read_text(encoding=encoding))

    def read(self) -> str:
        """Return the file's text content.

        Raises:
            ReadError: If the loader fails or there is no content source.
        """
        if self.raw_text is not None:
            return self.raw_text
        if self.loader is None:
            raise ReadError(self.name, "No content to read")
        try:
            return self.loader()
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(self.name, str(e)) from e


@dataclass
class FileOutcome:
    """Result of loading one file: exactly one of record / error / skipped is set."""

    name: str
    record: Optional[FileRecord] = None
    error: Optional[PlotterError] = None
    skipped: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def load_file(
    upload: UploadedFile,
    threshold: Optional[int] = None,
    target: Optional[int] = None,
) -> FileOutcome:
    """Read, parse, extract and downsample a single file.

    Per-file errors are captured in the outcome rather than raised.
    """
    threshold = config.DOWNSAMPLING_THRESHOLD if threshold is None else threshold
    target = config.DOWNSAMPLED_POINT_COUNT if target is None else target

    try:
        text = upload.read()
        table = parse_table(text, upload.name)
    except (ReadError, ParseError) as e:
        return FileOutcome(name=upload.name, error=e)

    if table.rejection is not None:
        logger.info("Skipping %s: %s (%d columns, %d rows)",
                    upload.name, table.rejection, len(table.columns), table.row_count)
        return FileOutcome(name=upload.name, skipped=table.rejection)

    series = extract_series(table, upload.name)
    series, reduced = downsample_series(series, threshold, target)
    if reduced:
        logger.debug("Downsampled %s from %d to %d points per series",
                     upload.name, table.row_count, target)
    return FileOutcome(
        name=upload.name,
        record=FileRecord(file_name=upload.name, series=series, downsampled=reduced),
    )


def load_batch(
    uploads: list[UploadedFile],
    max_workers: Optional[int] = None,
    threshold: Optional[int] = None,
    target: Optional[int] = None,
) -> list[FileOutcome]:
    """Load several files concurrently.

    Returns:
        One FileOutcome per upload, in the order of *uploads* regardless of
        which worker finished first.
    """
    if not uploads:
        return []
    workers = max_workers or config.PARALLEL_MAX_WORKERS
    workers = max(1, min(len(uploads), workers))
    logger.debug(f"Loading {len(uploads)} file(s) with {workers} worker(s): "
                 f"{[u.name for u in uploads]}")

    results_by_idx: dict[int, FileOutcome] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(load_file, upload, threshold, target): idx
            for idx, upload in enumerate(uploads)
        }
        for future in as_completed(futures):
            idx = futures[future]
            try:
                results_by_idx[idx] = future.result()
            except Exception as e:
                name = uploads[idx].name
                results_by_idx[idx] = FileOutcome(
                    name=name,
                    error=PlotterError(name, f"Unexpected error: {e}"),
                )

    return [results_by_idx[i] for i in range(len(uploads))]
