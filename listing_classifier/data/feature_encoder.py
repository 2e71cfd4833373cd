"""Feature encoder for converting standardized records to network input."""

import logging
from dataclasses import fields
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
import yaml

from .errors import FeatureConfigError
from .models import Record, State

logger = logging.getLogger(__name__)

# Closed enumerations available for one-hot encoding, keyed by record field
_ONE_HOT_ENUMS: dict[str, type[Enum]] = {"state": State}

_NUMERIC_RECORD_FIELDS = {
    f.name for f in fields(Record) if f.name not in ("state", "price_class", "price")
}

DEFAULT_CONFIG_PATH = Path(__file__).parent / "mappings" / "feature_config.yaml"


class FeatureEncoder:
    """
    Encodes records into fixed-length float vectors.

    Layout: the continuous fields listed in feature_config.yaml (already
    standardized by the pipeline) followed by one one-hot block per
    categorical field. The same encoder instance must be used for the
    training vectors and for any listing classified afterwards.

    Missing values do not normally reach the encoder; when they do, a
    continuous field encodes as 0.0 and a categorical field as an
    all-zero block.
    """

    def __init__(self, config_path: Path | None = None):
        """
        Initialize encoder with feature configuration.

        Args:
            config_path: Path to feature_config.yaml. If None, uses default location.
        """
        self._config_path = config_path or DEFAULT_CONFIG_PATH

        self._load_config()
        self._validate_fields()

        logger.info(
            f"FeatureEncoder initialized with {self.get_feature_count()} features "
            f"from {self._config_path}"
        )

    def _load_config(self) -> None:
        """Load feature configuration from YAML."""
        try:
            with open(self._config_path) as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise FeatureConfigError(
                f"Config file not found: {self._config_path}"
            ) from e
        except yaml.YAMLError as e:
            raise FeatureConfigError(f"Invalid YAML in feature config: {e}") from e

        if not isinstance(config, dict):
            raise FeatureConfigError(
                f"Feature config must be a mapping, got {type(config).__name__}"
            )

        required_keys = {"continuous_fields", "one_hot_fields"}
        missing = required_keys - config.keys()
        if missing:
            raise FeatureConfigError(
                f"Feature config missing required keys: {sorted(missing)}"
            )

        self._continuous: list[str] = list(config["continuous_fields"] or [])
        self._one_hot: list[str] = list(config["one_hot_fields"] or [])

    def _validate_fields(self) -> None:
        """Validate every configured field exists on Record with a usable type."""
        unknown = [f for f in self._continuous if f not in _NUMERIC_RECORD_FIELDS]
        if unknown:
            raise FeatureConfigError(
                f"Continuous fields not found on Record: {unknown}. "
                f"Available: {sorted(_NUMERIC_RECORD_FIELDS)}"
            )

        unsupported = [f for f in self._one_hot if f not in _ONE_HOT_ENUMS]
        if unsupported:
            raise FeatureConfigError(
                f"One-hot fields have no closed enumeration: {unsupported}. "
                f"Available: {sorted(_ONE_HOT_ENUMS)}"
            )

        if not self._continuous and not self._one_hot:
            raise FeatureConfigError("Feature config declares no features")

    @property
    def continuous_fields(self) -> list[str]:
        """Ordered continuous fields; these are the fields the pipeline standardizes."""
        return list(self._continuous)

    def encode(self, records: list[Record]) -> np.ndarray:
        """
        Encode a batch of records to a 2D array.

        Args:
            records: Records whose continuous fields are already standardized

        Returns:
            np.ndarray of shape (len(records), num_features), dtype float64
        """
        logger.debug(f"Encoding {len(records)} records")

        result = np.zeros((len(records), self.get_feature_count()), dtype=np.float64)
        for row, record in enumerate(records):
            result[row] = self.encode_single(record)

        logger.debug(f"Encoded to array shape {result.shape}")
        return result

    def encode_single(self, record: Record) -> np.ndarray:
        """Encode one record to a 1D vector."""
        features = [
            _value_or_zero(getattr(record, name)) for name in self._continuous
        ]
        for name in self._one_hot:
            features.extend(
                _one_hot_block(_ONE_HOT_ENUMS[name], getattr(record, name))
            )
        return np.array(features, dtype=np.float64)

    def get_feature_names(self) -> list[str]:
        """Return ordered list of feature names."""
        names = list(self._continuous)
        for name in self._one_hot:
            names.extend(
                f"{name}_{member.name.lower()}" for member in _ONE_HOT_ENUMS[name]
            )
        return names

    def get_feature_count(self) -> int:
        """Return total number of features in encoded output."""
        return len(self._continuous) + sum(
            len(_ONE_HOT_ENUMS[name]) for name in self._one_hot
        )


def _value_or_zero(value: Any) -> float:
    if value is None:
        return 0.0
    return float(value)


def _one_hot_block(enum_type: type[Enum], value: Enum | None) -> list[float]:
    members = list(enum_type)
    block = [0.0] * len(members)
    if value is not None:
        block[members.index(value)] = 1.0
    return block
