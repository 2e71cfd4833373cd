"""Data module for listing records, statistics and preprocessing."""

from .errors import (
    DataError,
    EmptySequenceError,
    FeatureConfigError,
    MissingFieldError,
    PreprocessingError,
    RecordLoadError,
    UnknownCategoryError,
)
from .feature_encoder import FeatureEncoder
from .loader import load_records, records_from_frame
from .models import (
    STATE_COUNT,
    DatasetSplit,
    PreprocessResult,
    Record,
    StandardizationParams,
    State,
)
from .pipeline import PipelineConfig, RecordPipeline, assign_price_classes
from .stats import mean_and_std, percentile

__all__ = [
    # Errors
    "DataError",
    "EmptySequenceError",
    "FeatureConfigError",
    "MissingFieldError",
    "PreprocessingError",
    "RecordLoadError",
    "UnknownCategoryError",
    # Feature encoding
    "FeatureEncoder",
    # Loading
    "load_records",
    "records_from_frame",
    # Models
    "DatasetSplit",
    "PreprocessResult",
    "Record",
    "StandardizationParams",
    "State",
    "STATE_COUNT",
    # Pipeline
    "PipelineConfig",
    "RecordPipeline",
    "assign_price_classes",
    # Statistics
    "mean_and_std",
    "percentile",
]
