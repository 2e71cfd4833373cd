"""
Network module: a small feedforward classifier with mini-batch backpropagation.

Usage:
    from listing_classifier.network import NeuralNetwork

    network = NeuralNetwork(23, [10, 10], 5, 0.01, rng=np.random.default_rng(0))
    forward_pass = network.forward(batch)
    network.backward(one_hot_targets, batch, forward_pass)
"""

from .activations import Activation
from .errors import (
    BatchShapeError,
    EmptyBatchError,
    InvalidArchitectureError,
    NetworkError,
)
from .layers import InitializationMethod, Layer, Neuron
from .models import ForwardPass, GradientDiagnostics
from .network import NeuralNetwork, cross_entropy_loss, softmax

__all__ = [
    # Network
    "NeuralNetwork",
    "softmax",
    "cross_entropy_loss",
    # Building blocks
    "Activation",
    "InitializationMethod",
    "Layer",
    "Neuron",
    # Models
    "ForwardPass",
    "GradientDiagnostics",
    # Errors
    "NetworkError",
    "InvalidArchitectureError",
    "EmptyBatchError",
    "BatchShapeError",
]
