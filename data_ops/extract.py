"""
Map a parsed table onto line series: the first column is the shared
abscissa, every other column becomes one Series.
"""

import numpy as np
import pandas as pd

from .parser import ParsedTable
from .store import Series


def series_name(column: str, file_name: str) -> str:
    """Display name of the series built from *column* of *file_name*."""
    return f"{column}({file_name})"


def _abscissa(values: pd.Series) -> np.ndarray:
    """Float abscissa when the column is numeric, otherwise its labels."""
    if pd.api.types.is_numeric_dtype(values) and not pd.api.types.is_bool_dtype(values):
        return values.to_numpy(dtype=np.float64)
    return values.to_numpy(dtype=object)


def extract_series(table: ParsedTable, file_name: str) -> list[Series]:
    """Build one Series per non-abscissa column of *table*.

    Value columns are coerced to float; cells that are not numbers become
    NaN in place, so every series keeps one y per row of the source and stays
    aligned with the abscissa. Rows are neither reordered nor filtered.

    Returns:
        Series in header order, or an empty list if the table was rejected
        (fewer than two columns or no data rows).
    """
    if table.rejection is not None:
        return []

    frame = table.frame
    x_column = table.columns[0]
    x = _abscissa(frame.iloc[:, 0])

    result = []
    for pos, column in enumerate(table.columns[1:], start=1):
        y = pd.to_numeric(frame.iloc[:, pos], errors="coerce").to_numpy(dtype=np.float64)
        result.append(Series(
            name=series_name(column, file_name),
            column=column,
            x_column=x_column,
            file_name=file_name,
            x=x,
            y=y,
        ))
    return result
