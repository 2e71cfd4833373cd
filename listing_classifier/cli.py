"""
Listing Classifier CLI - Train the price-class network and evaluate or predict.

Usage:
    listing-classifier evaluate --data.path ./realtor-data.csv --seed 7
    listing-classifier predict --data.path ./realtor-data.csv \\
        --bed 3 --bath 2 --acre-lot 0.12 --house-size 1450 --state "New York"
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass

import numpy as np

from .config import add_args, check_config, config_to_dict, normalize_config, setup_logging
from .data import (
    DataError,
    PipelineConfig,
    PreprocessResult,
    Record,
    RecordPipeline,
    State,
    load_records,
)
from .network import InitializationMethod, NetworkError, NeuralNetwork
from .observability import WandbLogger, create_wandb_logger
from .training import (
    ClassificationReport,
    Trainer,
    TrainingConfig,
    TrainingError,
    TrainingResult,
    evaluate,
)

logger = logging.getLogger(__name__)


@dataclass
class TrainedClassifier:
    """Everything produced by one load-preprocess-train run."""

    pipeline: RecordPipeline
    preprocessed: PreprocessResult
    network: NeuralNetwork
    training: TrainingResult


def train_classifier(
    config: argparse.Namespace,
    wandb_logger: WandbLogger | None = None,
) -> TrainedClassifier:
    """Load the listing CSV, preprocess it and train a fresh network."""
    rng = np.random.default_rng(config.seed)

    records = load_records(config.data_path)

    pipeline = RecordPipeline(
        PipelineConfig(
            num_classes=config.num_classes,
            train_ratio=config.train_ratio,
            max_workers=config.workers,
        )
    )
    preprocessed = pipeline.preprocess(records, rng=rng)

    network = NeuralNetwork(
        input_count=pipeline.feature_count,
        hidden_layers=config.hidden_layers,
        output_count=config.num_classes,
        learning_rate=config.learning_rate,
        rng=rng,
        initialization=InitializationMethod(config.weight_init),
    )

    trainer = Trainer(
        TrainingConfig(batch_size=config.batch_size, epochs=config.epochs),
        on_epoch_end=wandb_logger.log_epoch if wandb_logger else None,
    )
    split = preprocessed.split
    training = trainer.train(network, split.train_features, split.train_labels, rng=rng)

    return TrainedClassifier(
        pipeline=pipeline,
        preprocessed=preprocessed,
        network=network,
        training=training,
    )


def print_report(report: ClassificationReport) -> None:
    """Print accuracy and per-class metrics."""
    print("Evaluation Results:")
    print(f"  Samples:  {report.n_samples}")
    print(f"  Accuracy: {report.accuracy:.2%}")
    print()
    print(f"  {'Class':>5}  {'Precision':>9}  {'Recall':>9}  {'F1':>9}  {'Support':>7}")
    for metrics in report.per_class:
        print(
            f"  {metrics.label:>5}  {metrics.precision:>9.4f}  "
            f"{metrics.recall:>9.4f}  {metrics.f1:>9.4f}  {metrics.support:>7}"
        )
    print(
        f"  {'avg':>5}  {report.average_precision:>9.4f}  "
        f"{report.average_recall:>9.4f}  {report.average_f1:>9.4f}"
    )


def cmd_evaluate(args: argparse.Namespace) -> int:
    """Execute the evaluate command."""
    wandb_logger = create_wandb_logger(
        project=args.wandb_project,
        entity=args.wandb_entity,
        enabled=not args.wandb_off,
    )
    wandb_logger.start_run(run_config=config_to_dict(args))

    try:
        trained = train_classifier(args, wandb_logger)
        split = trained.preprocessed.split

        print(f"Records loaded:  {trained.preprocessed.records_in}")
        print(f"Records kept:    {trained.preprocessed.records_kept}")
        print(f"Train/test:      {split.train_size}/{split.test_size}")
        print(f"Final loss:      {trained.training.final_loss:.4f}")
        if trained.training.non_finite_gradients:
            print(
                f"Non-finite gradient entries: {trained.training.non_finite_gradients}"
            )
        print()

        report = evaluate(
            trained.network,
            split.test_features,
            split.test_labels,
            num_classes=args.num_classes,
        )
        print_report(report)

        wandb_logger.log_run(trained.preprocessed, trained.training, report)
    finally:
        wandb_logger.finish()

    return 0


def cmd_predict(args: argparse.Namespace) -> int:
    """Execute the predict command."""
    listing = Record(
        bed=args.bed,
        bath=args.bath,
        acre_lot=args.acre_lot,
        zip_code=args.zip_code,
        house_size=args.house_size,
        state=State.parse(args.state) if args.state else None,
    )

    trained = train_classifier(args)

    vector = trained.pipeline.encode_for_prediction(listing, trained.preprocessed)
    probabilities = trained.network.predict_proba(vector)[0]
    predicted = int(np.argmax(probabilities)) + 1

    print(f"Predicted price class: {predicted} of {args.num_classes}")
    print("Class probabilities:")
    for label, probability in enumerate(probabilities, start=1):
        print(f"  {label}: {probability:.4f}")

    return 0


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="listing-classifier",
        description="Listing Classifier - Train and evaluate the price-class network",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="Command to execute",
    )

    # ─────────────────────────────────────────────────────────────────────────
    # EVALUATE command
    # ─────────────────────────────────────────────────────────────────────────
    eval_parser = subparsers.add_parser(
        "evaluate",
        help="Train on the listing CSV and evaluate on the held-out split",
        description="Preprocess, train, then report accuracy and per-class metrics.",
    )
    add_args(eval_parser)

    # ─────────────────────────────────────────────────────────────────────────
    # PREDICT command
    # ─────────────────────────────────────────────────────────────────────────
    predict_parser = subparsers.add_parser(
        "predict",
        help="Train on the listing CSV and classify one listing",
        description="Preprocess, train, then predict the price class of a listing.",
    )
    add_args(predict_parser)

    predict_parser.add_argument(
        "--bed", type=float, required=True, metavar="N", help="Number of bedrooms"
    )
    predict_parser.add_argument(
        "--bath", type=float, required=True, metavar="N", help="Number of bathrooms"
    )
    predict_parser.add_argument(
        "--acre-lot",
        dest="acre_lot",
        type=float,
        required=True,
        metavar="ACRES",
        help="Lot size in acres",
    )
    predict_parser.add_argument(
        "--house-size",
        dest="house_size",
        type=float,
        required=True,
        metavar="SQFT",
        help="Living area in square feet",
    )
    predict_parser.add_argument(
        "--zip-code",
        dest="zip_code",
        type=float,
        default=None,
        metavar="ZIP",
        help="Zip code (default: training corpus mean)",
    )
    predict_parser.add_argument(
        "--state",
        default=None,
        metavar="NAME",
        help="State name, e.g. 'New York' (default: none)",
    )

    config = parser.parse_args(args)
    normalize_config(config)
    return config


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    config = parse_args(args)
    setup_logging(config.log_level)

    try:
        check_config(config)

        if config.command == "evaluate":
            return cmd_evaluate(config)
        elif config.command == "predict":
            return cmd_predict(config)
        else:
            print(f"ERROR: Unknown command: {config.command}", file=sys.stderr)
            return 2

    except (DataError, NetworkError, TrainingError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
