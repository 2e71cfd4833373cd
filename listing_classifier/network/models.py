"""Data models for network propagation and gradient diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass(frozen=True)
class ForwardPass:
    """
    Everything one forward propagation computed for a batch.

    Returned by NeuralNetwork.forward and passed back into
    NeuralNetwork.backward for the same batch.
    """

    inputs: np.ndarray
    """The input batch, shape (rows, input_count)."""

    raw_outputs: tuple[np.ndarray, ...]
    """Pre-activation output of each layer, shape (rows, layer width)."""

    activated_outputs: tuple[np.ndarray, ...]
    """Activated output of each layer, shape (rows, layer width)."""

    probabilities: np.ndarray
    """Row-wise softmax of the final layer output, shape (rows, output_count)."""

    @property
    def batch_size(self) -> int:
        return len(self.inputs)

    def layer_input(self, index: int) -> np.ndarray:
        """Input fed to layer `index`: the batch for layer 0, else the previous activation."""
        if index == 0:
            return self.inputs
        return self.activated_outputs[index - 1]

    def predicted_classes(self) -> np.ndarray:
        """1-based class with the highest probability per row."""
        return np.argmax(self.probabilities, axis=1) + 1


@dataclass
class GradientDiagnostics:
    """
    Running count of non-finite gradient entries seen by backward passes.

    NaN or Inf gradients are still applied; this record makes them visible.
    """

    backward_passes: int = 0
    non_finite_count: int = 0
    non_finite_by_layer: dict[int, int] = field(default_factory=dict)

    @property
    def has_non_finite(self) -> bool:
        return self.non_finite_count > 0

    def record(self, layer_index: int, count: int) -> None:
        """Add `count` non-finite entries found in one layer's gradient."""
        if count <= 0:
            return
        self.non_finite_count += count
        self.non_finite_by_layer[layer_index] = (
            self.non_finite_by_layer.get(layer_index, 0) + count
        )

    def reset(self) -> None:
        self.backward_passes = 0
        self.non_finite_count = 0
        self.non_finite_by_layer.clear()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "backward_passes": self.backward_passes,
            "non_finite_count": self.non_finite_count,
            "non_finite_by_layer": dict(self.non_finite_by_layer),
        }
