"""
PlotSession - the single owner of plotting state.

Holds the file registry, the selection, the axis-title overrides and the
latest error, and exposes the mutators the file list, upload and export
controls need. Every mutation goes through one lock, so a batch merge,
a style change, a selection toggle and clear-all never interleave.
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import plotly.graph_objects as go

from data_ops.errors import PlotterError
from data_ops.ingest import FileOutcome, UploadedFile, load_batch
from data_ops.store import FileRecord, FileRegistry
from rendering.figure import export_filename, export_image, to_figure
from rendering.plot_request import PlotRequest, build_plot_request
from rendering.styles import default_style, validate_style

from .logging import log_error, tagged

logger = logging.getLogger("csv-plotter")


@dataclass
class BatchResult:
    """What happened to each file of one ``submit_files`` call."""

    added: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)   # already registered / repeated
    skipped: dict[str, str] = field(default_factory=dict)   # name -> rejection reason
    errors: dict[str, PlotterError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class PlotSession:
    """In-memory plotting session for a set of uploaded files."""

    def __init__(
        self,
        max_workers: Optional[int] = None,
        threshold: Optional[int] = None,
        target: Optional[int] = None,
    ):
        self._max_workers = max_workers
        self._threshold = threshold
        self._target = target
        self._registry = FileRegistry()
        self._selected: set[str] = set()
        self._x_title = ""
        self._y_title = ""
        self._last_error: Optional[str] = None
        self._lock = threading.RLock()
        # Bumped on every state change; keys the cached PlotRequest
        self._revision = 0
        self._cached_request: Optional[tuple[int, PlotRequest]] = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def registry(self) -> FileRegistry:
        return self._registry

    @property
    def selection(self) -> frozenset:
        with self._lock:
            return frozenset(self._selected)

    @property
    def axis_titles(self) -> tuple[str, str]:
        with self._lock:
            return self._x_title, self._y_title

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def selected_names(self) -> list[str]:
        """Selected file names in registry order."""
        with self._lock:
            return [name for name in self._registry.names() if name in self._selected]

    def file_list(self) -> list[dict]:
        """Per registered file, in insertion order: name, flags, style, trace count."""
        with self._lock:
            rows = []
            for entry in self._registry.list_entries():
                entry["selected"] = entry["name"] in self._selected
                rows.append(entry)
            return rows

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def submit_files(self, files: list[UploadedFile]) -> BatchResult:
        """Load a batch of files and register the ones that produce series.

        Names already registered (or repeated within the batch) are ignored.
        All new files are loaded concurrently; once every one has settled the
        successful ones are registered in submission order, styled by their
        registration position and selected.
        """
        result = BatchResult()
        with self._lock:
            self._last_error = None
            seen: set[str] = set()
            fresh: list[UploadedFile] = []
            for upload in files:
                if upload.name in seen or self._registry.has(upload.name):
                    result.ignored.append(upload.name)
                    continue
                seen.add(upload.name)
                fresh.append(upload)

        if not fresh:
            return result

        outcomes = load_batch(
            fresh,
            max_workers=self._max_workers,
            threshold=self._threshold,
            target=self._target,
        )

        with self._lock:
            records = [self._collect(outcome, result) for outcome in outcomes]
            records = [r for r in records if r is not None]
            result.added = self._registry.merge(records, style_for=default_style)
            self._selected.update(result.added)
            self._touch()

        if result.added:
            logger.info(f"Registered {len(result.added)} file(s): {result.added}",
                        extra=tagged("files_added"))
        return result

    def _collect(self, outcome: FileOutcome, result: BatchResult) -> Optional[FileRecord]:
        if outcome.error is not None:
            # Last error wins
            self._last_error = str(outcome.error)
            result.errors[outcome.name] = outcome.error
            log_error(f"Could not load {outcome.name}", exc=outcome.error,
                      context={"file": outcome.name})
            return None
        if outcome.skipped is not None:
            result.skipped[outcome.name] = outcome.skipped
            return None
        return outcome.record

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def toggle_selection(self, file_name: str) -> bool:
        """Flip the selection of *file_name*. Returns the new state.

        Raises:
            KeyError: If the file is not registered.
        """
        with self._lock:
            selected = file_name not in self._selected
            self.set_selected(file_name, selected)
            return selected

    def set_selected(self, file_name: str, selected: bool) -> None:
        """Select or deselect a registered file.

        Raises:
            KeyError: If the file is not registered.
        """
        with self._lock:
            if not self._registry.has(file_name):
                raise KeyError(file_name)
            if selected:
                self._selected.add(file_name)
            else:
                self._selected.discard(file_name)
            self._touch()

    def set_style(self, file_name: str, style: str) -> None:
        """Override the line style of one file.

        Raises:
            KeyError: If the file is not registered.
            ValueError: If *style* is not in the palette.
        """
        validate_style(style)
        with self._lock:
            self._registry.set_style(file_name, style)
            self._touch()
        logger.debug(f"Style of {file_name} set to {style}")

    def set_axis_titles(self, x_title: Optional[str] = None, y_title: Optional[str] = None) -> None:
        """Set axis-title overrides; None leaves a title unchanged, "" restores the default."""
        with self._lock:
            if x_title is not None:
                self._x_title = x_title
            if y_title is not None:
                self._y_title = y_title
            self._touch()

    def clear_all(self) -> None:
        """Forget every file, the selection, styles and axis titles."""
        with self._lock:
            self._registry.clear()
            self._selected.clear()
            self._x_title = ""
            self._y_title = ""
            self._last_error = None
            self._touch()
        logger.info("Cleared all files")

    def _touch(self) -> None:
        self._revision += 1

    # ------------------------------------------------------------------
    # Plot output
    # ------------------------------------------------------------------

    def plot_request(self) -> PlotRequest:
        """Current render payload, rebuilt only when the state changed.

        Each call returns its own copy, so callers may edit the trace and
        layout dicts without affecting later calls.
        """
        with self._lock:
            cached = self._cached_request
            if cached is None or cached[0] != self._revision:
                records = [self._registry.get(name) for name in self.selected_names()]
                request = build_plot_request(records, self._x_title, self._y_title)
                cached = self._cached_request = (self._revision, request)
            return copy.deepcopy(cached[1])

    def figure(self) -> go.Figure:
        """Plotly figure of the current plot."""
        return to_figure(self.plot_request())

    def export_filename(self) -> str:
        """Image name derived from the selected files (extension stripped)."""
        return export_filename(self.selected_names())

    def export_image(self, directory: str = ".", format: str = "png") -> dict:
        """Export the current plot to ``<directory>/<export_filename>.<format>``."""
        filepath = str(Path(directory) / self.export_filename())
        result = export_image(self.plot_request(), filepath, format=format)
        if result["status"] != "success":
            logger.warning(f"Export failed: {result['message']}")
        return result
