"""Activation functions for network layers."""

from __future__ import annotations

from enum import Enum

import numpy as np


class Activation(Enum):
    """
    Activation applied by every neuron of a layer.

    RELU is used by hidden layers, IDENTITY by the output layer (softmax is
    applied to the whole output row by the network, not per neuron).
    Both methods accept scalars or arrays and work element-wise.
    """

    RELU = "relu"
    IDENTITY = "identity"

    def activate(self, x: float | np.ndarray) -> np.ndarray:
        """Apply the activation."""
        x = np.asarray(x, dtype=np.float64)
        if self is Activation.RELU:
            return np.maximum(x, 0.0)
        return x

    def derivative(self, x: float | np.ndarray) -> np.ndarray:
        """Derivative of the activation evaluated at the raw (pre-activation) value."""
        x = np.asarray(x, dtype=np.float64)
        if self is Activation.RELU:
            return np.where(x > 0, 1.0, 0.0)
        return np.ones_like(x)
