"""
Classifier configuration management.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from .network import InitializationMethod


def parse_hidden_layers(value: str) -> list[int]:
    """
    Parse a comma-separated list of hidden layer widths.

    "10,10" -> [10, 10]; an empty string means no hidden layers.
    """
    value = value.strip()
    if not value:
        return []
    try:
        return [int(part) for part in value.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"Hidden layers must be comma-separated integers, got {value!r}"
        ) from e


def _env_seed() -> int | None:
    raw = os.environ.get("SEED", "")
    return int(raw) if raw else None


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Add classifier arguments to the parser.

    Arguments can be overridden by environment variables.
    """

    parser.add_argument(
        "--data.path",
        dest="data_path",
        type=str,
        help="Path to the realtor listing CSV.",
        default=os.environ.get("DATA_PATH", "realtor-data.csv"),
    )

    # Model settings
    parser.add_argument(
        "--model.hidden_layers",
        dest="hidden_layers",
        type=parse_hidden_layers,
        help="Comma-separated hidden layer widths.",
        default=parse_hidden_layers(os.environ.get("HIDDEN_LAYERS", "10,10")),
    )

    parser.add_argument(
        "--model.learning_rate",
        dest="learning_rate",
        type=float,
        help="Learning rate for gradient descent.",
        default=float(os.environ.get("LEARNING_RATE", "0.01")),
    )

    parser.add_argument(
        "--model.init",
        dest="weight_init",
        type=str,
        choices=[method.value for method in InitializationMethod],
        help="Weight initialization scheme.",
        default=os.environ.get("WEIGHT_INIT", InitializationMethod.RANDOM.value),
    )

    parser.add_argument(
        "--model.num_classes",
        dest="num_classes",
        type=int,
        help="Number of ordinal price classes (at least 3).",
        default=int(os.environ.get("NUM_CLASSES", "5")),
    )

    # Training settings
    parser.add_argument(
        "--train.ratio",
        dest="train_ratio",
        type=float,
        help="Fraction of records used for training.",
        default=float(os.environ.get("TRAIN_RATIO", "0.9")),
    )

    parser.add_argument(
        "--train.batch_size",
        dest="batch_size",
        type=int,
        help="Mini-batch size.",
        default=int(os.environ.get("BATCH_SIZE", "16")),
    )

    parser.add_argument(
        "--train.epochs",
        dest="epochs",
        type=int,
        help="Number of passes over the training set.",
        default=int(os.environ.get("EPOCHS", "1")),
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for weight initialization and shuffling. Random if unset.",
        default=_env_seed(),
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Worker threads for per-feature statistics.",
        default=int(os.environ.get("WORKERS", "5")),
    )

    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
        default=os.environ.get("LOG_LEVEL", "INFO"),
    )

    # WandB is opt-in for local runs
    parser.add_argument(
        "--wandb.off",
        dest="wandb_off",
        action=argparse.BooleanOptionalAction,
        help="Disable WandB logging.",
        default=os.environ.get("WANDB_OFF", "true").lower() == "true",
    )

    parser.add_argument(
        "--wandb.project",
        dest="wandb_project",
        type=str,
        help="WandB project name.",
        default=os.environ.get("WANDB_PROJECT", "listing-classifier"),
    )

    parser.add_argument(
        "--wandb.entity",
        dest="wandb_entity",
        type=str,
        help="WandB entity.",
        default=os.environ.get("WANDB_ENTITY", ""),
    )


def normalize_config(config: argparse.Namespace) -> None:
    """Convert parsed strings to their working types."""
    config.data_path = Path(config.data_path)


def check_config(config: argparse.Namespace) -> None:
    """
    Validate configuration.

    Raises:
        ValueError: If configuration is invalid.
    """
    if any(width <= 0 for width in config.hidden_layers):
        raise ValueError(
            f"--model.hidden_layers widths must be positive, got {config.hidden_layers}"
        )

    if config.learning_rate <= 0:
        raise ValueError(
            f"--model.learning_rate must be positive, got {config.learning_rate}"
        )

    if config.num_classes < 3:
        raise ValueError(
            f"--model.num_classes must be at least 3, got {config.num_classes}"
        )

    if not 0.0 < config.train_ratio < 1.0:
        raise ValueError(
            f"--train.ratio must be within (0, 1), got {config.train_ratio}"
        )

    if config.batch_size <= 0:
        raise ValueError(
            f"--train.batch_size must be positive, got {config.batch_size}"
        )

    if config.epochs <= 0:
        raise ValueError(f"--train.epochs must be positive, got {config.epochs}")

    if config.workers <= 0:
        raise ValueError(f"--workers must be positive, got {config.workers}")


def config_to_dict(config: argparse.Namespace) -> dict[str, Any]:
    """Convert config to dictionary for logging."""
    return {
        "data_path": str(config.data_path),
        "hidden_layers": list(config.hidden_layers),
        "learning_rate": config.learning_rate,
        "weight_init": config.weight_init,
        "num_classes": config.num_classes,
        "train_ratio": config.train_ratio,
        "batch_size": config.batch_size,
        "epochs": config.epochs,
        "seed": config.seed,
        "workers": config.workers,
        "log_level": config.log_level,
        "wandb_off": config.wandb_off,
        "wandb_project": config.wandb_project,
        "wandb_entity": config.wandb_entity,
    }


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
