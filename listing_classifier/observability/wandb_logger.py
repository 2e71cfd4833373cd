"""WandB logging for training runs."""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .models import RunSummaryLog, WandbConfig

if TYPE_CHECKING:
    import wandb
    from listing_classifier.data.models import PreprocessResult
    from listing_classifier.training.models import (
        ClassificationReport,
        EpochStats,
        TrainingResult,
    )

logger = logging.getLogger(__name__)


class WandbLogger:
    """
    WandB logger for classifier training runs.

    Handles:
    - Initialization of WandB run with the run configuration
    - Logging per-epoch loss as scalars
    - Logging the evaluation summary as scalars
    - Logging per-class precision/recall/F1 as a table

    Usage:
        config = WandbConfig(project="listing-classifier")
        wandb_logger = WandbLogger(config)

        wandb_logger.start_run(run_config={"hidden_layers": [10, 10]})
        trainer = Trainer(on_epoch_end=wandb_logger.log_epoch)
        ...
        wandb_logger.log_run(preprocessed, training_result, report)
        wandb_logger.finish()
    """

    def __init__(self, config: WandbConfig):
        """
        Initialize WandB logger.

        Args:
            config: WandB configuration
        """
        self._config = config
        self._run: wandb.sdk.wandb_run.Run | None = None
        self._wandb: Any = None  # Lazy import

    def _import_wandb(self) -> Any:
        """Lazy import wandb to avoid dependency if disabled."""
        if self._wandb is None:
            try:
                import wandb

                self._wandb = wandb
            except ImportError as e:
                logger.error("wandb not installed. Install with: pip install wandb")
                raise ImportError(
                    "wandb is required for WandbLogger. Install with: pip install wandb"
                ) from e
        return self._wandb

    @property
    def is_enabled(self) -> bool:
        """Check if logging is enabled."""
        return self._config.enabled

    @property
    def is_running(self) -> bool:
        """Check if a run is currently active."""
        return self._run is not None

    def start_run(
        self,
        run_config: dict[str, Any] | None = None,
        run_name: str | None = None,
    ) -> None:
        """
        Start a new WandB run.

        Args:
            run_config: Hyperparameters recorded with the run
            run_name: Optional run name override
        """
        if not self._config.enabled:
            logger.info("WandB logging is disabled")
            return

        # Set API key if provided (wandb also checks WANDB_API_KEY env var)
        if self._config.api_key:
            os.environ["WANDB_API_KEY"] = self._config.api_key

        wandb = self._import_wandb()

        if run_name is None:
            run_name = self._config.run_name
        if run_name is None:
            timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
            run_name = f"classifier-{timestamp}"

        mode = "offline" if self._config.offline else "online"

        self._run = wandb.init(
            project=self._config.project,
            entity=self._config.entity,
            name=run_name,
            tags=list(self._config.tags),
            config=run_config or {},
            mode=mode,
        )

        logger.info(f"WandB run started: {self._run.name} ({self._run.url})")

    def finish(self) -> None:
        """Finish the current WandB run."""
        if self._run is not None:
            self._run.finish()
            logger.info("WandB run finished")
            self._run = None

    def log_epoch(self, stats: EpochStats) -> None:
        """Log one epoch's loss. Usable as Trainer's on_epoch_end callback."""
        if not self._config.enabled or self._run is None:
            return

        try:
            self._run.log(
                {
                    "epoch": stats.epoch,
                    "train_loss": stats.mean_loss,
                    "non_finite_gradients": stats.non_finite_gradients,
                }
            )
        except Exception as e:
            logger.error(f"Failed to log epoch to WandB: {e}", exc_info=True)

    def log_run(
        self,
        preprocessed: PreprocessResult,
        training: TrainingResult,
        report: ClassificationReport,
    ) -> None:
        """
        Log the outcome of a complete train-and-evaluate run.

        Args:
            preprocessed: Pipeline result (dataset sizes)
            training: Training result (loss, diagnostics, timing)
            report: Evaluation report on the test partition
        """
        if not self._config.enabled:
            return

        if self._run is None:
            logger.warning("WandB run not started. Call start_run() first.")
            return

        try:
            summary = self._build_summary_log(preprocessed, training, report)
            self._run.log(summary.to_summary_dict())

            if self._config.log_class_table:
                self._log_class_table(report)

            logger.info(
                f"Logged run: accuracy={report.accuracy:.4f}, "
                f"test_size={summary.test_size}"
            )

        except Exception as e:
            logger.error(f"Failed to log run to WandB: {e}", exc_info=True)
            # Don't raise - logging failures shouldn't break training

    def _build_summary_log(
        self,
        preprocessed: PreprocessResult,
        training: TrainingResult,
        report: ClassificationReport,
    ) -> RunSummaryLog:
        """Build RunSummaryLog from run results."""
        return RunSummaryLog(
            timestamp=datetime.now(UTC),
            records_in=preprocessed.records_in,
            records_kept=preprocessed.records_kept,
            train_size=preprocessed.split.train_size,
            test_size=preprocessed.split.test_size,
            epochs=len(training.epochs),
            final_loss=training.final_loss,
            non_finite_gradients=training.non_finite_gradients,
            training_time_ms=training.total_time_ms,
            accuracy=report.accuracy,
            average_precision=report.average_precision,
            average_recall=report.average_recall,
            average_f1=report.average_f1,
        )

    def _log_class_table(self, report: ClassificationReport) -> None:
        """Log per-class metrics as a WandB table."""
        wandb = self._import_wandb()

        columns = ["class", "precision", "recall", "f1", "support"]
        table = wandb.Table(columns=columns)

        for metrics in report.per_class:
            row = metrics.to_dict()
            table.add_data(
                row["label"],
                row["precision"],
                row["recall"],
                row["f1"],
                row["support"],
            )

        self._run.log({"class_metrics": table})


def create_wandb_logger(
    project: str = "listing-classifier",
    entity: str | None = None,
    api_key: str | None = None,
    enabled: bool = True,
    offline: bool = False,
    tags: list[str] | None = None,
) -> WandbLogger:
    """
    Create a WandB logger with common configuration.

    Args:
        project: WandB project name
        entity: WandB entity (team/user)
        api_key: WandB API key (or set WANDB_API_KEY env var)
        enabled: Whether logging is enabled
        offline: Run in offline mode
        tags: Extra run tags

    Returns:
        Configured WandbLogger instance

    Example:
        logger = create_wandb_logger(
            project="listing-classifier",
            enabled=not config.wandb_off,
        )
        logger.start_run(run_config=config_to_dict(config))
        logger.log_run(preprocessed, training_result, report)
        logger.finish()
    """
    config = WandbConfig(
        project=project,
        entity=entity or None,
        api_key=api_key or None,
        enabled=enabled,
        offline=offline,
        tags=list(tags or []),
    )
    return WandbLogger(config)
