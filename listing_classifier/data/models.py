"""Data models for listing records and preprocessing results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .errors import UnknownCategoryError


class State(Enum):
    """
    Closed enumeration of the states a listing can belong to.

    Declaration order is the one-hot position used by the feature encoder.
    """

    PUERTO_RICO = "Puerto Rico"
    VIRGIN_ISLANDS = "Virgin Islands"
    MASSACHUSETTS = "Massachusetts"
    CONNECTICUT = "Connecticut"
    NEW_HAMPSHIRE = "New Hampshire"
    VERMONT = "Vermont"
    NEW_JERSEY = "New Jersey"
    NEW_YORK = "New York"
    SOUTH_CAROLINA = "South Carolina"
    TENNESSEE = "Tennessee"
    RHODE_ISLAND = "Rhode Island"
    VIRGINIA = "Virginia"
    WYOMING = "Wyoming"
    MAINE = "Maine"
    GEORGIA = "Georgia"
    PENNSYLVANIA = "Pennsylvania"
    WEST_VIRGINIA = "West Virginia"
    DELAWARE = "Delaware"

    @property
    def index(self) -> int:
        """Position of this state in the one-hot encoding."""
        return _STATE_ORDER.index(self)

    @classmethod
    def parse(cls, text: str) -> State:
        """
        Parse a state name, ignoring case and whitespace.

        "New York", "NewYork" and "new york" all map to State.NEW_YORK.

        Raises:
            UnknownCategoryError: If the name is not a supported state
        """
        key = _normalize_state_name(text)
        if key not in _STATE_LOOKUP:
            raise UnknownCategoryError(
                f"Unknown value '{text}' for field 'state'. "
                f"Valid values: {[s.value for s in cls]}"
            )
        return _STATE_LOOKUP[key]


def _normalize_state_name(text: str) -> str:
    return "".join(text.split()).lower()


_STATE_ORDER: list[State] = list(State)
_STATE_LOOKUP: dict[str, State] = {
    _normalize_state_name(s.value): s for s in State
}

STATE_COUNT = len(_STATE_ORDER)


@dataclass(frozen=True)
class Record:
    """
    One real-estate listing.

    Every field may be None (missing). price_class is attached by the
    pipeline and is never present in raw input.
    """

    price: float | None = None
    bed: float | None = None
    bath: float | None = None
    acre_lot: float | None = None
    zip_code: float | None = None
    house_size: float | None = None
    state: State | None = None
    price_class: int | None = None


@dataclass(frozen=True)
class StandardizationParams:
    """
    Per-feature mean and population standard deviation fitted on a corpus.

    Reused to standardize listings submitted after training so that they
    land in the same feature space as the training vectors.
    """

    means: dict[str, float]
    stds: dict[str, float]

    def transform(self, field_name: str, value: float) -> float:
        """Z-score a single value, or 0.0 when the feature was constant."""
        std = self.stds[field_name]
        if std == 0:
            return 0.0
        return (value - self.means[field_name]) / std

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Convert to dictionary for logging."""
        return {
            name: {"mean": self.means[name], "std": self.stds[name]}
            for name in self.means
        }


@dataclass(frozen=True)
class DatasetSplit:
    """Train/test partition of encoded feature vectors and class labels."""

    train_features: np.ndarray
    train_labels: np.ndarray
    test_features: np.ndarray
    test_labels: np.ndarray

    @property
    def train_size(self) -> int:
        return len(self.train_labels)

    @property
    def test_size(self) -> int:
        return len(self.test_labels)

    def as_tuple(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Return (train_features, train_labels, test_features, test_labels)."""
        return (
            self.train_features,
            self.train_labels,
            self.test_features,
            self.test_labels,
        )


@dataclass(frozen=True)
class PreprocessResult:
    """Everything produced by a full run of the record pipeline."""

    split: DatasetSplit
    standardization: StandardizationParams
    zip_code_mean: float
    """Mean zip code of the filtered corpus, used to impute new listings."""

    records_in: int
    records_kept: int
    class_counts: dict[int, int] = field(default_factory=dict)

    @property
    def records_dropped(self) -> int:
        return self.records_in - self.records_kept
