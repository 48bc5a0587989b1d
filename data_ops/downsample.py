"""
Largest-Triangle-Three-Buckets (LTTB) downsampling.

Reduces a line to a fixed number of points while keeping the peaks and
inflections a naive stride would miss. The first and last points are always
kept; every bucket in between contributes the point that forms the largest
triangle with the previously kept point and the centroid of the next bucket.
"""

import math
from typing import Sequence

import numpy as np

from .store import Series


def _finite_mean(values: np.ndarray) -> float:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return math.nan
    return float(finite.mean())


def lttb_indices(x, y, target: int) -> np.ndarray:
    """Return the row indices LTTB keeps when reducing (x, y) to *target* points.

    Args:
        x: Abscissa values (numeric).
        y: Ordinate values (numeric, NaN allowed).
        target: Number of points to keep; 0 means "keep everything".

    Returns:
        Increasing integer indices into the input. All indices when
        ``len(x) <= target`` or ``target == 0``.

    Raises:
        ValueError: If *target* is negative, or 1 with more than one point.
    """
    n = len(x)
    if target < 0:
        raise ValueError(f"target must be >= 0, got {target}")
    if n <= target or target == 0:
        return np.arange(n)
    if target == 1:
        raise ValueError("target must be at least 2 to keep both end points")
    if target == 2:
        return np.array([0, n - 1])

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    # Bucket size. Leave room for the first and last points
    every = (n - 2) / (target - 2)

    kept = np.empty(target, dtype=np.intp)
    kept[0] = 0
    a = 0

    for i in range(target - 2):
        # Centroid of the next bucket
        avg_start = math.floor((i + 1) * every) + 1
        avg_end = min(math.floor((i + 2) * every) + 1, n)
        avg_x = _finite_mean(x[avg_start:avg_end])
        avg_y = _finite_mean(y[avg_start:avg_end])

        # Candidates of this bucket
        start = math.floor(i * every) + 1
        end = math.floor((i + 1) * every) + 1
        ax, ay = x[a], y[a]
        areas = np.abs(
            (ax - avg_x) * (y[start:end] - ay) - (ax - x[start:end]) * (avg_y - ay)
        ) * 0.5

        # argmax picks the first maximum; NaN areas never win
        areas = np.where(np.isnan(areas), -1.0, areas)
        a = start + int(np.argmax(areas))
        kept[i + 1] = a

    kept[-1] = n - 1
    return kept


def downsample(points: Sequence, target: int) -> Sequence:
    """Reduce a sequence of (x, y) points to *target* points with LTTB.

    Returns *points* itself when there is nothing to do (``len(points) <=
    target`` or ``target == 0``). Otherwise returns a list of exactly
    *target* of the original point objects, first and last included.
    """
    if len(points) <= target or target == 0:
        return points
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return [points[i] for i in lttb_indices(xs, ys, target)]


def downsample_series(
    series: list[Series], threshold: int, target: int,
) -> tuple[list[Series], bool]:
    """Apply the downsampling policy to each series independently.

    A series is reduced to *target* points only when it has more than
    *threshold* points. Series whose abscissa is text use the row position
    for the triangle areas and keep their labels.

    Returns:
        (series list in the same order, True if any series was reduced)
    """
    out = []
    reduced = False
    for s in series:
        if len(s) <= threshold:
            out.append(s)
            continue
        x = s.x if s.numeric_x else np.arange(len(s), dtype=np.float64)
        idx = lttb_indices(x, s.y, target)
        if len(idx) < len(s):
            reduced = True
            out.append(s.take(idx))
        else:
            out.append(s)
    return out, reduced
