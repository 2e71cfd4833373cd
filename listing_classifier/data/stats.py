"""
Summary statistics used for filtering, banding and standardization.

- percentile: linear-interpolation order statistic
- mean_and_std: arithmetic mean and population standard deviation

Both operate on plain numeric sequences; callers drop missing values first.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from .errors import EmptySequenceError


def _as_array(values: Iterable[float] | np.ndarray) -> np.ndarray:
    if isinstance(values, np.ndarray):
        return values.astype(np.float64, copy=False).ravel()
    return np.fromiter(values, dtype=np.float64)


def percentile(values: Iterable[float] | np.ndarray, p: float) -> float:
    """
    Compute the p-th percentile using linear interpolation between ranks.

    The 1-based rank is n = (N - 1) * p + 1. When n is a whole number the
    element at that rank is returned, otherwise the two bracketing elements
    are interpolated.

    Args:
        values: Numeric values (any order)
        p: Percentile as a fraction in [0, 1]

    Returns:
        The interpolated order statistic

    Raises:
        EmptySequenceError: If values is empty
        ValueError: If p is outside [0, 1]

    Example:
        >>> percentile([100, 200, 300, 400, 500, 600, 700, 800, 900, 1000], 0.2)
        280.0
    """
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Percentile must be within [0, 1], got {p}")

    ordered = np.sort(_as_array(values))
    count = len(ordered)
    if count == 0:
        raise EmptySequenceError("Cannot compute percentile of an empty sequence")

    rank = (count - 1) * p + 1
    k = math.floor(rank)

    if rank == k:
        return float(ordered[k - 1])

    d = rank - k
    return float(ordered[k - 1] + d * (ordered[k] - ordered[k - 1]))


def mean_and_std(values: Iterable[float] | np.ndarray) -> tuple[float, float]:
    """
    Compute the arithmetic mean and population standard deviation.

    Standard deviation is exactly 0.0 when every value is identical, so
    callers can test for a degenerate feature with `std == 0`.

    Raises:
        EmptySequenceError: If values is empty
    """
    array = _as_array(values)
    if len(array) == 0:
        raise EmptySequenceError("Cannot compute mean of an empty sequence")

    if np.all(array == array[0]):
        return float(array[0]), 0.0

    mean = float(np.mean(array))
    std = float(np.sqrt(np.mean((array - mean) ** 2)))
    return mean, std
