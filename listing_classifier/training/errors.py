"""Custom exceptions for training module."""


class TrainingError(Exception):
    """Base exception for training and evaluation errors."""

    pass


class LabelRangeError(TrainingError):
    """
    Raised when a class label is outside 1..num_classes.

    This can happen when:
    - Labels are passed 0-based instead of 1-based
    - The network has fewer outputs than the pipeline has classes
    """

    pass


# --- Metrics errors ---


class MetricsError(TrainingError):
    """
    Raised when metrics calculation fails.

    This can happen when:
    - True and predicted label arrays have different lengths
    """

    pass


class EmptyDatasetError(MetricsError):
    """
    Raised when there is nothing to train on or evaluate.

    This can happen when:
    - The test partition is empty (train ratio too close to 1)
    - No training rows were produced by preprocessing
    """

    pass
