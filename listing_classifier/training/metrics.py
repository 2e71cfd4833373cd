"""
Classification metrics for ordinal price classes.

For each class c:
- precision = TP / (TP + FP)
- recall = TP / (TP + FN)
- F1 = 2 * precision * recall / (precision + recall)

A zero denominator yields NaN rather than an arbitrary fallback, so a
class that is never predicted (or never present) shows up as NaN in the
report and in the unweighted averages.
"""

from __future__ import annotations

import numpy as np

from .errors import EmptyDatasetError, LabelRangeError, MetricsError
from .models import ClassificationReport, ClassMetrics


def calculate_classification_metrics(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    num_classes: int,
) -> ClassificationReport:
    """
    Calculate accuracy and per-class precision, recall and F1.

    Args:
        y_true: True 1-based labels
        y_pred: Predicted 1-based labels
        num_classes: Number of classes (K)

    Returns:
        ClassificationReport with one entry per class 1..K

    Raises:
        MetricsError: If arrays have different lengths
        EmptyDatasetError: If arrays are empty
        LabelRangeError: If a label is outside 1..K

    Example:
        >>> report = calculate_classification_metrics(
        ...     np.array([1, 2, 3]), np.array([1, 2, 2]), num_classes=3
        ... )
        >>> round(report.accuracy, 4)
        0.6667
    """
    y_true = np.asarray(y_true, dtype=np.int64).flatten()
    y_pred = np.asarray(y_pred, dtype=np.int64).flatten()

    if len(y_true) != len(y_pred):
        raise MetricsError(
            f"Array length mismatch: y_true={len(y_true)}, y_pred={len(y_pred)}"
        )

    if len(y_true) == 0:
        raise EmptyDatasetError("Empty input arrays")

    for name, labels in (("y_true", y_true), ("y_pred", y_pred)):
        if labels.min() < 1 or labels.max() > num_classes:
            raise LabelRangeError(
                f"{name} labels must be within 1..{num_classes}, "
                f"got range {labels.min()}..{labels.max()}"
            )

    correct = y_true == y_pred
    # Index c-1 holds counts for class c
    true_positives = np.bincount(y_pred[correct] - 1, minlength=num_classes)
    false_positives = np.bincount(y_pred[~correct] - 1, minlength=num_classes)
    false_negatives = np.bincount(y_true[~correct] - 1, minlength=num_classes)

    per_class = tuple(
        _class_metrics(
            label=c + 1,
            tp=int(true_positives[c]),
            fp=int(false_positives[c]),
            fn=int(false_negatives[c]),
        )
        for c in range(num_classes)
    )

    return ClassificationReport(
        per_class=per_class,
        accuracy=float(np.mean(correct)),
        n_samples=len(y_true),
    )


def _class_metrics(label: int, tp: int, fp: int, fn: int) -> ClassMetrics:
    precision = _safe_ratio(tp, tp + fp)
    recall = _safe_ratio(tp, tp + fn)
    f1 = _safe_ratio(2 * precision * recall, precision + recall)
    return ClassMetrics(
        label=label,
        true_positives=tp,
        false_positives=fp,
        false_negatives=fn,
        precision=precision,
        recall=recall,
        f1=f1,
    )


def _safe_ratio(numerator: float, denominator: float) -> float:
    """Division returning NaN when the denominator is zero or either side is NaN."""
    if denominator == 0 or np.isnan(denominator) or np.isnan(numerator):
        return float("nan")
    return float(numerator / denominator)
