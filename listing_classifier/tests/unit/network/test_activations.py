"""Tests for activation functions."""

import numpy as np

from listing_classifier.network import Activation


class TestRelu:
    """Tests for Activation.RELU."""

    def test_activate_clamps_negatives(self) -> None:
        x = np.array([-2.0, -0.0, 0.5, 3.0])

        np.testing.assert_array_equal(Activation.RELU.activate(x), [0.0, 0.0, 0.5, 3.0])

    def test_derivative_is_step(self) -> None:
        """Derivative is 1 for positive input, 0 otherwise (including 0)."""
        x = np.array([-1.0, 0.0, 1e-9, 4.0])

        np.testing.assert_array_equal(Activation.RELU.derivative(x), [0.0, 0.0, 1.0, 1.0])

    def test_scalar_input(self) -> None:
        assert float(Activation.RELU.activate(-3.0)) == 0.0
        assert float(Activation.RELU.derivative(2.0)) == 1.0


class TestIdentity:
    """Tests for Activation.IDENTITY."""

    def test_activate_returns_input(self) -> None:
        x = np.array([[-2.0, 1.5], [0.0, 7.0]])

        np.testing.assert_array_equal(Activation.IDENTITY.activate(x), x)

    def test_derivative_is_one(self) -> None:
        x = np.array([-5.0, 0.0, 5.0])

        np.testing.assert_array_equal(Activation.IDENTITY.derivative(x), np.ones(3))
