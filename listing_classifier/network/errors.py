"""Custom exceptions for network module."""


class NetworkError(Exception):
    """Base exception for neural-network errors."""

    pass


class InvalidArchitectureError(NetworkError):
    """
    Raised when a network, layer or neuron cannot be constructed.

    This can happen when:
    - A layer width or input count is zero or negative
    - The learning rate is zero or negative
    """

    pass


class EmptyBatchError(NetworkError):
    """
    Raised when a batch with no rows is propagated.

    Empty batches are a caller bug; the smallest valid batch has one row.
    """

    pass


class BatchShapeError(NetworkError):
    """
    Raised when batch dimensions do not match the network.

    This can happen when:
    - Input rows are not as wide as the input layer
    - Target rows are not as wide as the output layer
    - Target and input row counts differ
    - The forward pass passed to backward belongs to a different batch
    """

    pass
