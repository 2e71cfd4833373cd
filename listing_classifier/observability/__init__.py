"""
Observability module for training-run logging.

This module provides WandB integration for logging epoch loss,
evaluation summaries and per-class metrics.

Usage:
    from listing_classifier.observability import create_wandb_logger

    wandb_logger = create_wandb_logger(project="listing-classifier", enabled=True)
    wandb_logger.start_run(run_config={"learning_rate": 0.01})
    wandb_logger.log_run(preprocessed, training_result, report)
    wandb_logger.finish()

Logged Data:
    - Epoch scalars: train loss, non-finite gradient count
    - Summary scalars: dataset sizes, final loss, accuracy, averaged metrics
    - Class metrics table: per-class precision, recall, F1 and support
"""

from .models import RunSummaryLog, WandbConfig
from .wandb_logger import WandbLogger, create_wandb_logger

__all__ = [
    # Main entry point
    "create_wandb_logger",
    # Classes
    "WandbLogger",
    "WandbConfig",
    # Log models
    "RunSummaryLog",
]
