"""Training loop and evaluation for the listing classifier."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from ..network import NeuralNetwork, cross_entropy_loss
from .batching import iter_batches, one_hot
from .errors import EmptyDatasetError
from .metrics import calculate_classification_metrics
from .models import ClassificationReport, EpochStats, TrainingResult

logger = logging.getLogger(__name__)

EpochCallback = Callable[[EpochStats], None]


@dataclass(frozen=True)
class TrainingConfig:
    """Configuration for mini-batch training."""

    batch_size: int = 16
    """Rows per forward/backward step."""

    epochs: int = 1
    """Passes over the training set."""

    shuffle_each_epoch: bool = False
    """Reshuffle training rows before every epoch after the first."""


class Trainer:
    """
    Runs mini-batch gradient descent over a training set.

    Each batch is propagated forward, its loss recorded, and the weights
    updated once from the batch-averaged gradient.

    Usage:
        trainer = Trainer(TrainingConfig(batch_size=16, epochs=1))
        result = trainer.train(network, x_train, y_train)
        report = evaluate(network, x_test, y_test)
    """

    def __init__(
        self,
        config: TrainingConfig | None = None,
        on_epoch_end: EpochCallback | None = None,
    ):
        """
        Initialize trainer.

        Args:
            config: Training configuration. Uses defaults if None.
            on_epoch_end: Optional callback receiving each epoch's stats
        """
        self._config = config or TrainingConfig()
        self._on_epoch_end = on_epoch_end

        if self._config.batch_size <= 0:
            raise ValueError(
                f"Batch size must be greater than 0, got {self._config.batch_size}"
            )
        if self._config.epochs <= 0:
            raise ValueError(f"Epochs must be greater than 0, got {self._config.epochs}")

    @property
    def config(self) -> TrainingConfig:
        return self._config

    def train(
        self,
        network: NeuralNetwork,
        features: np.ndarray,
        labels: np.ndarray,
        rng: np.random.Generator | None = None,
    ) -> TrainingResult:
        """
        Train the network in place.

        The network's gradient diagnostics are reset first, so after the
        call they describe this run only.

        Args:
            network: Network to update
            features: Training rows, shape (N, input_count)
            labels: 1-based class labels, shape (N,)
            rng: Generator for per-epoch reshuffling

        Returns:
            TrainingResult with per-epoch statistics

        Raises:
            EmptyDatasetError: If there are no training rows
        """
        if len(labels) == 0:
            raise EmptyDatasetError("No training rows")

        network.diagnostics.reset()
        rng = rng or np.random.default_rng()
        start_time = time.time()
        result = TrainingResult()

        logger.info(
            f"Training on {len(labels)} rows: batch_size={self._config.batch_size}, "
            f"epochs={self._config.epochs}"
        )

        for epoch in range(1, self._config.epochs + 1):
            if self._config.shuffle_each_epoch and epoch > 1:
                order = rng.permutation(len(labels))
                features, labels = features[order], labels[order]

            stats = self.train_epoch(network, features, labels, epoch)
            result.epochs.append(stats)

            if self._on_epoch_end is not None:
                self._on_epoch_end(stats)

        result.total_time_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Training complete in {result.total_time_ms:.0f}ms, "
            f"final loss={result.final_loss:.4f}"
        )
        return result

    def train_epoch(
        self,
        network: NeuralNetwork,
        features: np.ndarray,
        labels: np.ndarray,
        epoch: int = 1,
    ) -> EpochStats:
        """Run one pass over the training rows."""
        non_finite_before = network.diagnostics.non_finite_count
        total_loss = 0.0
        batches = 0

        for batch_features, batch_labels in iter_batches(
            features, labels, self._config.batch_size
        ):
            targets = one_hot(batch_labels, network.output_count)
            forward_pass = network.forward(batch_features)
            loss = cross_entropy_loss(forward_pass.probabilities, targets)
            network.backward(targets, batch_features, forward_pass)

            total_loss += loss * len(batch_labels)
            batches += 1
            logger.debug(f"Epoch {epoch} batch {batches}: loss={loss:.4f}")

        stats = EpochStats(
            epoch=epoch,
            batches=batches,
            samples=len(labels),
            mean_loss=total_loss / len(labels),
            non_finite_gradients=network.diagnostics.non_finite_count
            - non_finite_before,
        )
        logger.info(
            f"Epoch {epoch}: {batches} batches, mean loss={stats.mean_loss:.4f}"
        )
        return stats


def predict_classes(network: NeuralNetwork, features: np.ndarray) -> np.ndarray:
    """Predict the 1-based class with the highest probability for each row."""
    return network.forward(features).predicted_classes()


def evaluate(
    network: NeuralNetwork,
    features: np.ndarray,
    labels: np.ndarray,
    num_classes: int | None = None,
) -> ClassificationReport:
    """
    Classify held-out rows and compare against their true labels.

    Args:
        network: Trained network
        features: Test rows, shape (N, input_count)
        labels: True 1-based labels, shape (N,)
        num_classes: Number of classes. Defaults to the network's output width.

    Raises:
        EmptyDatasetError: If there are no test rows
    """
    if len(labels) == 0:
        raise EmptyDatasetError("No test rows to evaluate")

    num_classes = num_classes or network.output_count
    predictions = predict_classes(network, features)
    report = calculate_classification_metrics(labels, predictions, num_classes)

    logger.info(
        f"Evaluated {report.n_samples} rows: accuracy={report.accuracy:.4f}, "
        f"avg_f1={report.average_f1:.4f}"
    )
    return report
