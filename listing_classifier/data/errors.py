"""Custom exceptions for data module."""


class DataError(Exception):
    """Base exception for data-related errors."""

    pass


# --- Statistics errors ---


class EmptySequenceError(DataError):
    """
    Raised when a summary statistic is requested over no values.

    This can happen when:
    - Every record is missing the field a percentile is computed over
    - An empty column is passed to mean_and_std
    """

    pass


# --- Feature encoding errors ---


class FeatureConfigError(DataError):
    """
    Raised when feature configuration is invalid or cannot be loaded.

    This can happen when:
    - Config file not found
    - Invalid YAML syntax
    - Missing required keys in config
    - Config names a field that records do not have
    """

    pass


class MissingFieldError(DataError):
    """
    Raised when a required field is missing from a record.

    This can happen when:
    - A record reaches classification without a price
    - A record reaches standardization without a continuous field
    """

    pass


class UnknownCategoryError(DataError):
    """
    Raised when a categorical value is not in the closed enumeration.

    This can happen when:
    - A state name is not one of the 18 supported states
    """

    pass


# --- Loading and preprocessing errors ---


class RecordLoadError(DataError):
    """
    Raised when raw records cannot be read.

    This can happen when:
    - The CSV file does not exist
    - The CSV file is missing a required column
    """

    pass


class PreprocessingError(DataError):
    """
    Raised when the record pipeline cannot run.

    This can happen when:
    - No record survives percentile filtering
    - Fewer than 3 classes are requested
    - The train ratio is outside (0, 1)
    """

    pass
