"""
In-memory file registry.

Series holds one plotted line (abscissa + one value column of one file).
FileRecord groups a file's series with its line style and downsampled flag.
FileRegistry is an insertion-ordered, name-keyed container of FileRecords.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional

import numpy as np


def _frozen(values) -> np.ndarray:
    arr = np.array(values, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(eq=False)
class Series:
    """A single line series extracted from an uploaded file.

    Attributes:
        name: Display name, e.g. "voltage(run1.csv)".
        column: Header of the value column.
        x_column: Header of the abscissa (first) column.
        file_name: File the series came from.
        x: Abscissa values (float, or the original labels when non-numeric).
        y: Float values; cells that were not numeric are NaN.
    """

    name: str
    column: str
    x_column: str
    file_name: str
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self):
        self.x = _frozen(self.x)
        self.y = _frozen(self.y)
        if len(self.x) != len(self.y):
            raise ValueError(
                f"Series '{self.name}' has {len(self.x)} x values but {len(self.y)} y values"
            )

    def __len__(self) -> int:
        return len(self.y)

    @property
    def numeric_x(self) -> bool:
        """True if the abscissa holds numbers rather than text labels."""
        return np.issubdtype(self.x.dtype, np.number)

    def take(self, indices) -> "Series":
        """Return a new Series keeping only the rows at *indices*."""
        return Series(
            name=self.name,
            column=self.column,
            x_column=self.x_column,
            file_name=self.file_name,
            x=self.x[indices],
            y=self.y[indices],
        )


@dataclass
class FileRecord:
    """Everything the registry knows about one uploaded file.

    All series of a record are drawn with the record's ``style``.
    """

    file_name: str
    series: list[Series] = field(default_factory=list)
    style: str = "solid"
    downsampled: bool = False

    @property
    def trace_count(self) -> int:
        return len(self.series)

    def summary(self) -> dict:
        """Return a compact summary dict for file-list displays."""
        return {
            "name": self.file_name,
            "downsampled": self.downsampled,
            "style": self.style,
            "trace_count": self.trace_count,
            "num_points": len(self.series[0]) if self.series else 0,
            "columns": [s.column for s in self.series],
        }


class FileRegistry:
    """Ordered, deduplicated collection of FileRecords keyed by file name.

    Insertion order is the display and plot order. Adding a name that is
    already registered is a no-op.
    """

    def __init__(self):
        self._records: dict[str, FileRecord] = {}
        self._lock = threading.RLock()

    def merge(
        self,
        records: Iterable[FileRecord],
        style_for: Optional[Callable[[int], str]] = None,
    ) -> list[str]:
        """Register several records in one step, in the order given.

        Args:
            records: Records to add; already-registered names are skipped.
            style_for: Optional callable mapping a record's registration
                position to its initial style.

        Returns:
            Names that were actually added.
        """
        with self._lock:
            added = []
            for record in records:
                if record.file_name in self._records:
                    continue
                if style_for is not None:
                    record.style = style_for(len(self._records))
                self._records[record.file_name] = record
                added.append(record.file_name)
            return added

    def get(self, file_name: str) -> Optional[FileRecord]:
        """Retrieve a FileRecord by name, or None if not found."""
        with self._lock:
            return self._records.get(file_name)

    def has(self, file_name: str) -> bool:
        """Check if a file name is registered."""
        with self._lock:
            return file_name in self._records

    def names(self) -> list[str]:
        """Registered file names in insertion order."""
        with self._lock:
            return list(self._records)

    def records(self) -> list[FileRecord]:
        """Registered records in insertion order."""
        with self._lock:
            return list(self._records.values())

    def set_style(self, file_name: str, style: str) -> None:
        """Change the line style of one record; other records are untouched.

        Raises:
            KeyError: If the name is not registered.
        """
        with self._lock:
            if file_name not in self._records:
                raise KeyError(file_name)
            self._records[file_name].style = style

    def list_entries(self) -> list[dict]:
        """Return summary dicts for all records in insertion order."""
        with self._lock:
            return [record.summary() for record in self._records.values()]

    def clear(self) -> None:
        """Remove all records."""
        with self._lock:
            self._records.clear()

    def __contains__(self, file_name: object) -> bool:
        return self.has(file_name)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
