"""
Record pipeline turning raw listings into labelled feature vectors.

Stages run strictly in order, each over the whole working set:
1. filter_records: drop incomplete listings and those above the 95th
   percentile of any filtered feature
2. impute_missing: fill missing zip codes with the corpus mean
3. assign_classes: band prices into ordinal classes 1..K
4. fit_standardization / standardize: z-score the continuous features
5. vectorize: encode records with the FeatureEncoder
6. split: shuffle and partition into train and test sets

Statistics over independent features are computed concurrently and joined
before the next stage starts. Per-record work is expressed as array
operations over whole columns.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import TypeVar

import numpy as np

from .errors import MissingFieldError, PreprocessingError
from .feature_encoder import FeatureEncoder
from .models import DatasetSplit, PreprocessResult, Record, StandardizationParams
from .stats import mean_and_std, percentile

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the record pipeline."""

    filter_percentile: float = 0.95
    """Records above this percentile of any filter field are dropped."""

    filter_fields: tuple[str, ...] = ("price", "bed", "bath", "acre_lot", "house_size")
    """Fields that must be present and within the filter percentile."""

    min_price: float = 1.0
    """Sanity floor; price must be strictly greater than this."""

    lower_class_percentile: float = 0.20
    """Prices at or below this percentile get class 1."""

    upper_class_percentile: float = 0.80
    """Prices at or above this percentile get class K."""

    num_classes: int = 5
    """Number of ordinal price classes (K). Must be at least 3."""

    train_ratio: float = 0.9
    """Fraction of shuffled records assigned to the training partition."""

    max_workers: int = 5
    """Maximum threads used for per-feature statistics."""


def assign_price_classes(
    prices: np.ndarray,
    num_classes: int,
    lower_percentile: float = 0.20,
    upper_percentile: float = 0.80,
) -> np.ndarray:
    """
    Band prices into ordinal classes 1..num_classes.

    Class 1 covers prices at or below the lower percentile, class K prices
    at or above the upper percentile. The K-2 interior classes split the
    range between them into equal-width bands; a price on a band edge
    belongs to the lower band.

    Args:
        prices: 1D array of prices (no missing values)
        num_classes: K, at least 3
        lower_percentile: Percentile bounding class 1
        upper_percentile: Percentile bounding class K

    Returns:
        1D int array of class labels

    Example:
        >>> assign_price_classes(np.arange(100.0, 1001.0, 100.0), 5)
        array([1, 1, 2, 2, 3, 3, 4, 4, 5, 5])
    """
    if num_classes < 3:
        raise PreprocessingError(
            f"At least 3 classes are required for price banding, got {num_classes}"
        )

    prices = np.asarray(prices, dtype=np.float64)
    lo = percentile(prices, lower_percentile)
    hi = percentile(prices, upper_percentile)
    width = (hi - lo) / (num_classes - 2)

    # Upper edge of interior band i is lo + (i + 1) * width
    upper_edges = lo + np.arange(1, num_classes - 1) * width
    band = np.searchsorted(upper_edges, prices, side="left")
    labels = 2 + np.minimum(band, num_classes - 3)

    labels[prices <= lo] = 1
    labels[prices >= hi] = num_classes
    return labels.astype(np.int64)


class RecordPipeline:
    """
    Preprocess raw listing records into train/test feature vectors.

    Usage:
        pipeline = RecordPipeline(PipelineConfig(num_classes=5))
        result = pipeline.preprocess(records, rng=np.random.default_rng(7))
        x_train, y_train, x_test, y_test = result.split.as_tuple()

        # Later, for a listing submitted after training:
        vector = pipeline.encode_for_prediction(new_record, result)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        encoder: FeatureEncoder | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration. Uses defaults if None.
            encoder: Feature encoder. Uses the packaged feature config if None.
        """
        self._config = config or PipelineConfig()
        self._encoder = encoder or FeatureEncoder()

        if self._config.num_classes < 3:
            raise PreprocessingError(
                f"num_classes must be at least 3, got {self._config.num_classes}"
            )
        if not 0.0 < self._config.train_ratio < 1.0:
            raise PreprocessingError(
                f"train_ratio must be within (0, 1), got {self._config.train_ratio}"
            )

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @property
    def encoder(self) -> FeatureEncoder:
        return self._encoder

    @property
    def feature_count(self) -> int:
        """Width of the vectors this pipeline produces."""
        return self._encoder.get_feature_count()

    def preprocess(
        self,
        records: Sequence[Record],
        rng: np.random.Generator | None = None,
    ) -> PreprocessResult:
        """
        Run every stage over a batch of raw records.

        Args:
            records: Raw records from the ingestion layer
            rng: Generator used for the train/test shuffle

        Returns:
            PreprocessResult with the split and the fitted standardization

        Raises:
            PreprocessingError: If no record survives filtering
        """
        rng = rng or np.random.default_rng()
        records_in = len(records)

        kept = self.filter_records(records)
        if not kept:
            raise PreprocessingError(
                f"No records survived filtering ({records_in} records in)"
            )

        kept, zip_code_mean = self.impute_missing(kept)
        labelled = self.assign_classes(kept)
        params = self.fit_standardization(labelled)
        standardized = self.standardize(labelled, params)
        features, labels = self.vectorize(standardized)
        split = self.split(features, labels, rng)

        class_counts = dict(sorted(Counter(labels.tolist()).items()))
        logger.info(
            f"Preprocessed {records_in} records: kept {len(kept)}, "
            f"train={split.train_size}, test={split.test_size}, "
            f"classes={class_counts}"
        )

        return PreprocessResult(
            split=split,
            standardization=params,
            zip_code_mean=zip_code_mean,
            records_in=records_in,
            records_kept=len(kept),
            class_counts=class_counts,
        )

    # --- Stage 1: filter ---

    def filter_records(self, records: Sequence[Record]) -> list[Record]:
        """
        Keep records that have every filter field within its percentile threshold.

        Thresholds are computed per field over the records where that field
        is present. Zip code is not a filter field, so records missing it
        are kept for imputation.
        """
        if not records:
            return []

        columns = {name: _column(records, name) for name in self._config.filter_fields}
        present = {
            name: column[~np.isnan(column)] for name, column in columns.items()
        }

        thresholds = self._fan_out(
            lambda name: (
                percentile(present[name], self._config.filter_percentile)
                if len(present[name])
                else np.nan
            ),
            self._config.filter_fields,
        )

        mask = np.ones(len(records), dtype=bool)
        for name, column in columns.items():
            # NaN compares False, so missing values and NaN thresholds both drop
            with np.errstate(invalid="ignore"):
                mask &= column <= thresholds[name]
        with np.errstate(invalid="ignore"):
            mask &= columns["price"] > self._config.min_price

        kept = [record for record, keep in zip(records, mask) if keep]
        logger.info(
            f"Filtered records: kept {len(kept)} / {len(records)} "
            f"(thresholds: {_format_thresholds(thresholds)})"
        )
        return kept

    # --- Stage 2: impute ---

    def impute_missing(self, records: Sequence[Record]) -> tuple[list[Record], float]:
        """
        Fill missing zip codes with the mean zip code of the records that have one.

        Returns:
            (records with zip code filled, zip code mean)

        Raises:
            PreprocessingError: If no record has a zip code
        """
        zip_codes = _column(records, "zip_code")
        missing = np.isnan(zip_codes)
        if missing.all():
            raise PreprocessingError("Cannot impute zip code: no record has one")

        zip_code_mean, _ = mean_and_std(zip_codes[~missing])
        if missing.any():
            logger.info(
                f"Imputing zip code for {int(missing.sum())} records "
                f"with mean {zip_code_mean:.2f}"
            )

        filled = [
            replace(record, zip_code=zip_code_mean) if is_missing else record
            for record, is_missing in zip(records, missing)
        ]
        return filled, zip_code_mean

    # --- Stage 3: classify ---

    def assign_classes(self, records: Sequence[Record]) -> list[Record]:
        """Attach an ordinal price class to every record."""
        prices = _column(records, "price")
        if np.isnan(prices).any():
            raise MissingFieldError("Every record needs a price to be classified")

        labels = assign_price_classes(
            prices,
            self._config.num_classes,
            self._config.lower_class_percentile,
            self._config.upper_class_percentile,
        )
        return [
            replace(record, price_class=int(label))
            for record, label in zip(records, labels)
        ]

    # --- Stage 4: standardize ---

    def fit_standardization(self, records: Sequence[Record]) -> StandardizationParams:
        """Compute mean and standard deviation of each continuous feature."""
        names = self._encoder.continuous_fields
        columns = {name: _column(records, name) for name in names}
        for name, column in columns.items():
            if np.isnan(column).any():
                raise MissingFieldError(
                    f"Missing required numeric field: '{name}' before standardization"
                )

        stats = self._fan_out(lambda name: mean_and_std(columns[name]), names)
        return StandardizationParams(
            means={name: stats[name][0] for name in names},
            stds={name: stats[name][1] for name in names},
        )

    def standardize(
        self,
        records: Sequence[Record],
        params: StandardizationParams,
    ) -> list[Record]:
        """Replace each continuous feature with its z-score under params."""
        names = self._encoder.continuous_fields
        return [
            replace(
                record,
                **{
                    name: params.transform(name, getattr(record, name))
                    for name in names
                    if getattr(record, name) is not None
                },
            )
            for record in records
        ]

    # --- Stage 5: vectorize ---

    def vectorize(self, records: Sequence[Record]) -> tuple[np.ndarray, np.ndarray]:
        """
        Encode records and collect their labels.

        Returns:
            (features of shape (N, feature_count), int labels of shape (N,))
        """
        features = self._encoder.encode(list(records))
        labels = np.array(
            [record.price_class or 0 for record in records], dtype=np.int64
        )
        return features, labels

    # --- Stage 6: split ---

    def split(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        rng: np.random.Generator,
    ) -> DatasetSplit:
        """
        Shuffle rows with a uniform permutation and partition them.

        The first int(N * train_ratio) shuffled rows form the training set,
        the rest the test set. No stratification by label.
        """
        if len(features) != len(labels):
            raise PreprocessingError(
                f"Row count mismatch: features={len(features)}, labels={len(labels)}"
            )

        order = rng.permutation(len(labels))
        train_count = int(len(labels) * self._config.train_ratio)
        train_idx, test_idx = order[:train_count], order[train_count:]

        return DatasetSplit(
            train_features=features[train_idx],
            train_labels=labels[train_idx],
            test_features=features[test_idx],
            test_labels=labels[test_idx],
        )

    # --- Prediction path ---

    def encode_for_prediction(
        self,
        record: Record,
        preprocessed: PreprocessResult,
    ) -> np.ndarray:
        """
        Encode a listing submitted after training.

        Uses the corpus zip-code mean and standardization fitted during
        preprocess, so the vector lives in the training feature space.

        Raises:
            MissingFieldError: If a continuous field other than zip code is missing
        """
        if record.zip_code is None:
            record = replace(record, zip_code=preprocessed.zip_code_mean)

        missing = [
            name
            for name in self._encoder.continuous_fields
            if getattr(record, name) is None
        ]
        if missing:
            raise MissingFieldError(f"Missing required numeric fields: {missing}")

        standardized = self.standardize([record], preprocessed.standardization)[0]
        return self._encoder.encode_single(standardized)

    def _fan_out(self, func: Callable[[str], T], names: Sequence[str]) -> dict[str, T]:
        """Evaluate func for every name concurrently and wait for all results."""
        with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
            results = list(executor.map(func, names))
        return dict(zip(names, results))


def _column(records: Sequence[Record], name: str) -> np.ndarray:
    """Extract one field as a float array with NaN for missing values."""
    return np.array(
        [np.nan if getattr(r, name) is None else getattr(r, name) for r in records],
        dtype=np.float64,
    )


def _format_thresholds(thresholds: dict[str, float]) -> str:
    return ", ".join(f"{name}<={value:.2f}" for name, value in thresholds.items())
