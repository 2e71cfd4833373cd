"""Mini-batch iteration and target encoding."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from .errors import LabelRangeError


def one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    """
    Encode 1-based class labels as one-hot rows.

    Args:
        labels: Integer labels in 1..num_classes
        num_classes: Width of each row

    Returns:
        Float array of shape (len(labels), num_classes)

    Raises:
        LabelRangeError: If any label is outside 1..num_classes
    """
    labels = np.asarray(labels, dtype=np.int64)
    if len(labels) and (labels.min() < 1 or labels.max() > num_classes):
        raise LabelRangeError(
            f"Labels must be within 1..{num_classes}, "
            f"got range {labels.min()}..{labels.max()}"
        )

    encoded = np.zeros((len(labels), num_classes), dtype=np.float64)
    encoded[np.arange(len(labels)), labels - 1] = 1.0
    return encoded


def iter_batches(
    features: np.ndarray,
    labels: np.ndarray,
    batch_size: int,
) -> Iterator[tuple[np.ndarray, np.ndarray]]:
    """
    Yield consecutive (features, labels) slices of at most batch_size rows.

    The last batch is shorter when the row count is not a multiple of
    batch_size.

    Raises:
        ValueError: If batch_size is not positive or row counts differ
    """
    if batch_size <= 0:
        raise ValueError(f"Batch size must be greater than 0, got {batch_size}")
    if len(features) != len(labels):
        raise ValueError(
            f"Row count mismatch: features={len(features)}, labels={len(labels)}"
        )

    for start in range(0, len(labels), batch_size):
        yield features[start : start + batch_size], labels[start : start + batch_size]
