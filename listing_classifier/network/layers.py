"""Neurons and layers of a feedforward network."""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

from .activations import Activation
from .errors import BatchShapeError, InvalidArchitectureError


class InitializationMethod(Enum):
    """How initial weights are drawn."""

    RANDOM = "random"
    """Uniform in +/- sqrt(2 / inputs)."""

    XAVIER = "xavier"
    """Uniform in +/- sqrt(6 / (inputs + 1))."""

    def limit(self, input_count: int) -> float:
        """Half-width of the uniform weight distribution."""
        if self is InitializationMethod.XAVIER:
            return math.sqrt(6.0 / (input_count + 1))
        return math.sqrt(2.0 / input_count)


class Neuron:
    """A weight vector and bias producing one output per input row."""

    def __init__(
        self,
        input_count: int,
        rng: np.random.Generator | None = None,
        method: InitializationMethod = InitializationMethod.RANDOM,
    ):
        """
        Initialize neuron with random weights and zero bias.

        Args:
            input_count: Number of inputs (width of the previous layer)
            rng: Random generator used for the weight draw
            method: Weight initialization scheme

        Raises:
            InvalidArchitectureError: If input_count is not positive
        """
        if input_count <= 0:
            raise InvalidArchitectureError(
                f"Neuron needs at least one input, got {input_count}"
            )

        rng = rng or np.random.default_rng()
        limit = method.limit(input_count)
        self.weights: np.ndarray = rng.uniform(-limit, limit, size=input_count)
        self.bias: float = 0.0

    @property
    def input_count(self) -> int:
        return len(self.weights)

    def calculate_output(
        self, inputs: np.ndarray, activation: Activation
    ) -> tuple[float, float]:
        """
        Return (raw, activated) output for one input row.

        The raw value is kept because backpropagation evaluates the
        activation derivative at it.
        """
        raw = float(np.dot(self.weights, inputs) + self.bias)
        return raw, float(activation.activate(raw))

    def update_weights(self, gradient: np.ndarray, learning_rate: float) -> None:
        """
        Step against the gradient.

        The bias moves by the mean of the weight gradient; there is no
        separate bias gradient.
        """
        self.weights = self.weights - learning_rate * gradient
        self.bias -= learning_rate * float(np.mean(gradient))


class Layer:
    """An ordered group of neurons sharing one activation."""

    def __init__(
        self,
        neuron_count: int,
        input_count: int,
        activation: Activation,
        rng: np.random.Generator | None = None,
        method: InitializationMethod = InitializationMethod.RANDOM,
    ):
        if neuron_count <= 0:
            raise InvalidArchitectureError(
                f"Layer needs at least one neuron, got {neuron_count}"
            )

        rng = rng or np.random.default_rng()
        self.neurons: list[Neuron] = [
            Neuron(input_count, rng=rng, method=method) for _ in range(neuron_count)
        ]
        self.activation = activation

    def __len__(self) -> int:
        return len(self.neurons)

    def __repr__(self) -> str:
        return (
            f"Layer({len(self.neurons)} neurons, {self.input_count} inputs, "
            f"{self.activation.value})"
        )

    @property
    def input_count(self) -> int:
        return self.neurons[0].input_count

    @property
    def weight_matrix(self) -> np.ndarray:
        """Weights stacked row per neuron, shape (neurons, inputs)."""
        return np.stack([neuron.weights for neuron in self.neurons])

    @property
    def biases(self) -> np.ndarray:
        return np.array([neuron.bias for neuron in self.neurons], dtype=np.float64)

    def forward(self, inputs: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Propagate a single input row through every neuron.

        Returns:
            (raw outputs, activated outputs), each of shape (neurons,)
        """
        inputs = np.asarray(inputs, dtype=np.float64)
        self._check_width(inputs.shape[-1])

        outputs = [n.calculate_output(inputs, self.activation) for n in self.neurons]
        raw = np.array([r for r, _ in outputs], dtype=np.float64)
        activated = np.array([a for _, a in outputs], dtype=np.float64)
        return raw, activated

    def forward_batch(self, inputs: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """
        Propagate a batch of rows at once.

        Equivalent to calling forward on every row; rows and neurons are
        independent, so the whole batch is one matrix product.

        Returns:
            (raw outputs, activated outputs), each of shape (rows, neurons)
        """
        self._check_width(inputs.shape[1])
        raw = inputs @ self.weight_matrix.T + self.biases
        return raw, self.activation.activate(raw)

    def _check_width(self, width: int) -> None:
        if width != self.input_count:
            raise BatchShapeError(
                f"Layer expects {self.input_count} inputs, got {width}"
            )
