"""Data models for training runs and classification reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _round(value: float, digits: int = 6) -> float | None:
    """Round for serialization; NaN becomes None."""
    if np.isnan(value):
        return None
    return round(value, digits)


@dataclass(frozen=True)
class ClassMetrics:
    """
    Precision, recall and F1 for one class.

    A metric whose denominator is zero is NaN (e.g. precision of a class
    the model never predicted).
    """

    label: int
    true_positives: int
    false_positives: int
    false_negatives: int
    precision: float
    recall: float
    f1: float

    @property
    def support(self) -> int:
        """Number of samples whose true label is this class."""
        return self.true_positives + self.false_negatives

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "label": self.label,
            "precision": _round(self.precision),
            "recall": _round(self.recall),
            "f1": _round(self.f1),
            "support": self.support,
        }


@dataclass(frozen=True)
class ClassificationReport:
    """
    Evaluation of predicted classes against true classes.

    Averages are unweighted means over classes. A NaN in any class makes
    the corresponding average NaN.
    """

    per_class: tuple[ClassMetrics, ...]
    accuracy: float
    n_samples: int

    @property
    def average_precision(self) -> float:
        return float(np.mean([m.precision for m in self.per_class]))

    @property
    def average_recall(self) -> float:
        return float(np.mean([m.recall for m in self.per_class]))

    @property
    def average_f1(self) -> float:
        return float(np.mean([m.f1 for m in self.per_class]))

    def get_class(self, label: int) -> ClassMetrics:
        """Metrics for a 1-based class label."""
        return self.per_class[label - 1]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "accuracy": _round(self.accuracy),
            "n_samples": self.n_samples,
            "average_precision": _round(self.average_precision),
            "average_recall": _round(self.average_recall),
            "average_f1": _round(self.average_f1),
            "per_class": [m.to_dict() for m in self.per_class],
        }


@dataclass(frozen=True)
class EpochStats:
    """Summary of one pass over the training set."""

    epoch: int
    batches: int
    samples: int
    mean_loss: float
    """Sample-weighted mean cross-entropy, measured before each batch's update."""

    non_finite_gradients: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "epoch": self.epoch,
            "batches": self.batches,
            "samples": self.samples,
            "mean_loss": _round(self.mean_loss),
            "non_finite_gradients": self.non_finite_gradients,
        }


@dataclass
class TrainingResult:
    """Results of a full training run."""

    epochs: list[EpochStats] = field(default_factory=list)
    total_time_ms: float = 0.0

    @property
    def final_loss(self) -> float | None:
        if not self.epochs:
            return None
        return self.epochs[-1].mean_loss

    @property
    def non_finite_gradients(self) -> int:
        return sum(e.non_finite_gradients for e in self.epochs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "epochs": [e.to_dict() for e in self.epochs],
            "final_loss": (
                _round(self.final_loss) if self.final_loss is not None else None
            ),
            "non_finite_gradients": self.non_finite_gradients,
            "total_time_ms": round(self.total_time_ms, 2),
        }
