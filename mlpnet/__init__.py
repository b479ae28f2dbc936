"""
mlpnet package
~~~~~~~~~~~~~~

Feedforward neural network with one hidden layer for MNIST digit recognition.
Contains the network implementation, weight persistence, data loading
utilities, the command line entry point and an API server.
"""

from mlpnet.network import Network
from mlpnet.model_persistence import FormatError, load_weights, save_weights
from mlpnet.matrix import ShapeError

__version__ = "1.0.0"

__all__ = [
    'Network',
    'FormatError',
    'ShapeError',
    'load_weights',
    'save_weights',
]
