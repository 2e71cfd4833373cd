"""
Feedforward classification network trained by mini-batch backpropagation.

Hidden layers use ReLU, the output layer is linear and its rows are
turned into class probabilities by a numerically stable softmax. The
output error for a one-hot target is (softmax - target), the gradient of
mean cross-entropy with respect to the output layer's raw values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np

from .activations import Activation
from .errors import (
    BatchShapeError,
    EmptyBatchError,
    InvalidArchitectureError,
)
from .layers import InitializationMethod, Layer
from .models import ForwardPass, GradientDiagnostics

logger = logging.getLogger(__name__)

NonFiniteHook = Callable[[int, int], None]
"""Called with (layer index, non-finite entry count) after a backward pass."""


def softmax(rows: np.ndarray) -> np.ndarray:
    """
    Row-wise softmax.

    Each row's maximum is subtracted before exponentiating, which prevents
    overflow without changing the result. Rows of equal values map to the
    uniform distribution.
    """
    rows = np.atleast_2d(np.asarray(rows, dtype=np.float64))
    shifted = rows - np.max(rows, axis=1, keepdims=True)
    exp = np.exp(shifted)
    return exp / np.sum(exp, axis=1, keepdims=True)


def cross_entropy_loss(probabilities: np.ndarray, targets: np.ndarray) -> float:
    """Mean cross-entropy of probability rows against one-hot target rows."""
    clipped = np.clip(probabilities, 1e-12, 1.0)
    return float(-np.sum(targets * np.log(clipped)) / len(targets))


class NeuralNetwork:
    """
    Feedforward network mapping feature vectors to class probabilities.

    Usage:
        network = NeuralNetwork(23, [10, 10], 5, 0.01, rng=np.random.default_rng(0))
        forward_pass = network.forward(batch)
        network.backward(one_hot_targets, batch, forward_pass)
    """

    def __init__(
        self,
        input_count: int,
        hidden_layers: Sequence[int],
        output_count: int,
        learning_rate: float,
        rng: np.random.Generator | None = None,
        initialization: InitializationMethod = InitializationMethod.RANDOM,
        on_non_finite: NonFiniteHook | None = None,
    ):
        """
        Build the layers and draw initial weights.

        Args:
            input_count: Width of the feature vectors
            hidden_layers: Width of each hidden layer, input side first
            output_count: Number of classes
            learning_rate: Step size for weight updates
            rng: Random generator for weight initialization
            initialization: Weight initialization scheme
            on_non_finite: Optional hook called when a gradient has NaN/Inf entries

        Raises:
            InvalidArchitectureError: If any width or the learning rate is not positive
        """
        widths = [input_count, *hidden_layers, output_count]
        if any(width <= 0 for width in widths):
            raise InvalidArchitectureError(
                f"All layer widths must be positive, got {widths}"
            )
        if learning_rate <= 0:
            raise InvalidArchitectureError(
                f"Learning rate must be positive, got {learning_rate}"
            )

        rng = rng or np.random.default_rng()
        self.layers: list[Layer] = []
        previous = input_count
        for width in hidden_layers:
            self.layers.append(
                Layer(width, previous, Activation.RELU, rng=rng, method=initialization)
            )
            previous = width
        self.layers.append(
            Layer(output_count, previous, Activation.IDENTITY, rng=rng, method=initialization)
        )

        self.learning_rate = learning_rate
        self.diagnostics = GradientDiagnostics()
        self._on_non_finite = on_non_finite

        logger.info(
            f"NeuralNetwork initialized: {' -> '.join(str(w) for w in widths)}, "
            f"learning_rate={learning_rate}, init={initialization.value}"
        )

    @property
    def input_count(self) -> int:
        return self.layers[0].input_count

    @property
    def output_count(self) -> int:
        return len(self.layers[-1])

    def forward(self, batch: np.ndarray) -> ForwardPass:
        """
        Propagate a batch and return every intermediate output.

        Args:
            batch: Input rows, shape (rows, input_count). A 1D vector is
                treated as a batch of one.

        Returns:
            ForwardPass whose probabilities rows each sum to 1

        Raises:
            EmptyBatchError: If the batch has no rows
            BatchShapeError: If rows are not input_count wide
        """
        inputs = self._as_batch(batch)

        raw_outputs = []
        activated_outputs = []
        current = inputs
        for layer in self.layers:
            raw, activated = layer.forward_batch(current)
            raw_outputs.append(raw)
            activated_outputs.append(activated)
            current = activated

        return ForwardPass(
            inputs=inputs,
            raw_outputs=tuple(raw_outputs),
            activated_outputs=tuple(activated_outputs),
            probabilities=softmax(current),
        )

    def predict_proba(self, batch: np.ndarray) -> np.ndarray:
        """Class probability rows for a batch."""
        return self.forward(batch).probabilities

    def compute_gradients(
        self,
        targets: np.ndarray,
        inputs: np.ndarray,
        forward_pass: ForwardPass,
    ) -> list[np.ndarray]:
        """
        Compute batch-averaged weight gradients for every layer.

        Error signals for all layers and all rows are derived from the
        current weights before anything is updated. A layer's gradient is
        the sum over rows of (neuron error x layer input row), divided by
        the batch size.

        Args:
            targets: One-hot target rows, shape (rows, output_count)
            inputs: The batch that produced forward_pass
            forward_pass: Result of forward(inputs)

        Returns:
            One array per layer, shape (neurons, inputs)

        Raises:
            BatchShapeError: If targets do not match inputs, or forward_pass
                was computed for a different batch
        """
        inputs = self._as_batch(inputs)
        targets = np.atleast_2d(np.asarray(targets, dtype=np.float64))
        self._check_backward_shapes(targets, inputs, forward_pass)

        batch_size = len(targets)
        errors: list[np.ndarray] = [np.empty(0)] * len(self.layers)
        errors[-1] = forward_pass.probabilities - targets

        for i in range(len(self.layers) - 2, -1, -1):
            layer = self.layers[i]
            propagated = errors[i + 1] @ self.layers[i + 1].weight_matrix
            errors[i] = propagated * layer.activation.derivative(
                forward_pass.raw_outputs[i]
            )

        return [
            error.T @ forward_pass.layer_input(i) / batch_size
            for i, error in enumerate(errors)
        ]

    def apply_gradients(self, gradients: Sequence[np.ndarray]) -> None:
        """
        Update every neuron with its averaged gradient.

        Non-finite gradient entries are counted in self.diagnostics and
        reported before being applied.
        """
        if len(gradients) != len(self.layers):
            raise BatchShapeError(
                f"Expected gradients for {len(self.layers)} layers, got {len(gradients)}"
            )

        self.diagnostics.backward_passes += 1
        for index, (layer, gradient) in enumerate(zip(self.layers, gradients)):
            non_finite = int(np.count_nonzero(~np.isfinite(gradient)))
            if non_finite:
                self._report_non_finite(index, non_finite)

            for neuron, neuron_gradient in zip(layer.neurons, gradient):
                neuron.update_weights(neuron_gradient, self.learning_rate)

    def backward(
        self,
        targets: np.ndarray,
        inputs: np.ndarray,
        forward_pass: ForwardPass,
    ) -> None:
        """
        Backpropagate one batch and update the weights in place.

        Args:
            targets: One-hot target rows, shape (rows, output_count)
            inputs: The batch that produced forward_pass
            forward_pass: Result of forward(inputs) with the current weights

        Raises:
            EmptyBatchError: If the batch has no rows
            BatchShapeError: If targets and inputs disagree in shape, or
                forward_pass was computed for a different batch
        """
        gradients = self.compute_gradients(targets, inputs, forward_pass)
        self.apply_gradients(gradients)

    def _as_batch(self, batch: np.ndarray) -> np.ndarray:
        inputs = np.atleast_2d(np.asarray(batch, dtype=np.float64))
        if inputs.size == 0:
            raise EmptyBatchError("Cannot propagate an empty batch")
        if inputs.ndim != 2 or inputs.shape[1] != self.input_count:
            raise BatchShapeError(
                f"Expected rows of width {self.input_count}, got shape {inputs.shape}"
            )
        return inputs

    def _check_backward_shapes(
        self,
        targets: np.ndarray,
        inputs: np.ndarray,
        forward_pass: ForwardPass,
    ) -> None:
        if targets.shape != (len(inputs), self.output_count):
            raise BatchShapeError(
                f"Targets shape {targets.shape} does not match "
                f"({len(inputs)}, {self.output_count})"
            )
        if forward_pass.inputs.shape != inputs.shape:
            raise BatchShapeError(
                f"Forward pass was computed for shape {forward_pass.inputs.shape}, "
                f"got inputs of shape {inputs.shape}"
            )
        if not np.array_equal(forward_pass.inputs, inputs, equal_nan=True):
            raise BatchShapeError("Forward pass was computed for a different batch")

    def _report_non_finite(self, layer_index: int, count: int) -> None:
        self.diagnostics.record(layer_index, count)
        logger.warning(
            f"Layer {layer_index} gradient has {count} non-finite entries "
            f"(total so far: {self.diagnostics.non_finite_count})"
        )
        if self._on_non_finite is not None:
            self._on_non_finite(layer_index, count)
