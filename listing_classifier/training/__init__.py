"""
Training module: mini-batch training loop and classification metrics.

Usage:
    from listing_classifier.training import Trainer, TrainingConfig, evaluate

    trainer = Trainer(TrainingConfig(batch_size=16))
    result = trainer.train(network, x_train, y_train)
    report = evaluate(network, x_test, y_test)
    print(f"Accuracy: {report.accuracy:.2%}")
"""

from .batching import iter_batches, one_hot
from .errors import EmptyDatasetError, LabelRangeError, MetricsError, TrainingError
from .metrics import calculate_classification_metrics
from .models import ClassificationReport, ClassMetrics, EpochStats, TrainingResult
from .trainer import Trainer, TrainingConfig, evaluate, predict_classes

__all__ = [
    # Main entry points
    "Trainer",
    "TrainingConfig",
    "evaluate",
    "predict_classes",
    # Batching
    "iter_batches",
    "one_hot",
    # Metrics
    "calculate_classification_metrics",
    # Models
    "ClassificationReport",
    "ClassMetrics",
    "EpochStats",
    "TrainingResult",
    # Errors
    "TrainingError",
    "MetricsError",
    "EmptyDatasetError",
    "LabelRangeError",
]
