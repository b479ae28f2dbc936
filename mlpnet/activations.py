"""
activations.py
~~~~~~~~~~~~~~

Activation functions paired with their derivatives.
"""

from typing import Callable, NamedTuple

import numpy as np

from mlpnet.matrix import Matrix, add_scalar, multiply, scale


class Activation(NamedTuple):
    """
    An activation and its derivative, passed to the network as one unit.

    forward is a cell function suitable for matrix.apply. derivative takes
    the already activated matrix and returns the slope at each cell.
    """
    name: str
    forward: Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]
    derivative: Callable[[Matrix], Matrix]


def sigmoid(row, col, z):
    """Logistic function 1 / (1 + e^-z); row and col are unused."""
    # e^-z saturates to inf or 0 for large |z|, which still yields 0.0 or 1.0
    with np.errstate(over='ignore', under='ignore'):
        return 1.0 / (1.0 + np.exp(-z))


def sigmoid_prime(m: Matrix) -> Matrix:
    """
    Derivative of the sigmoid expressed through its output.

    Since d/dz sigmoid(z) = sigmoid(z) * (1 - sigmoid(z)), passing the
    activations a gives a * (1 - a).
    """
    return multiply(m, add_scalar(1.0, scale(-1.0, m)))


SIGMOID = Activation(name='sigmoid', forward=sigmoid, derivative=sigmoid_prime)
