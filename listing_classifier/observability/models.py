"""Data models for observability and WandB logging."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def _round_or_none(value: float | None, digits: int = 6) -> float | None:
    if value is None or value != value:  # NaN check
        return None
    return round(value, digits)


@dataclass
class RunSummaryLog:
    """
    Summary of one train-and-evaluate run.

    Logged as WandB scalars; per-class metrics go to a separate table.
    """

    timestamp: datetime

    # Dataset info
    records_in: int
    records_kept: int
    train_size: int
    test_size: int

    # Training info
    epochs: int
    final_loss: float | None
    non_finite_gradients: int
    training_time_ms: float

    # Evaluation info
    accuracy: float
    average_precision: float
    average_recall: float
    average_f1: float

    def to_summary_dict(self) -> dict[str, Any]:
        """Convert to dictionary for WandB scalar logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "records_in": self.records_in,
            "records_kept": self.records_kept,
            "train_size": self.train_size,
            "test_size": self.test_size,
            "epochs": self.epochs,
            "final_loss": _round_or_none(self.final_loss),
            "non_finite_gradients": self.non_finite_gradients,
            "training_time_ms": round(self.training_time_ms, 2),
            "accuracy": _round_or_none(self.accuracy),
            "average_precision": _round_or_none(self.average_precision),
            "average_recall": _round_or_none(self.average_recall),
            "average_f1": _round_or_none(self.average_f1),
        }


@dataclass
class WandbConfig:
    """Configuration for WandB logging."""

    # Project settings
    project: str = "listing-classifier"
    entity: str | None = None  # WandB team/user, None = default

    # Authentication
    api_key: str | None = None  # WandB API key, or set WANDB_API_KEY env var

    # Run settings
    run_name: str | None = None  # Auto-generated if None
    tags: list[str] = field(default_factory=list)

    # Feature flags
    enabled: bool = True
    offline: bool = False  # Run in offline mode

    # What to log
    log_class_table: bool = True  # Log per-class metrics table
