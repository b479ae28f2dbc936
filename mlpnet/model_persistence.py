"""
model_persistence.py
~~~~~~~~~~~~~~~~~~~~

Binary persistence for network weights.

Each weight matrix lives in its own file using the NumPy .npy layout:
a versioned magic header describing dtype, memory order and shape,
followed by the row-major little-endian float64 cells.
"""

import os
import logging
from typing import BinaryIO, Tuple

import numpy as np
from numpy.lib import format as npy_format

from mlpnet.matrix import Matrix

# Configure module logger
logger = logging.getLogger(__name__)

HIDDEN_WEIGHTS_FILE = 'hweights.model'
OUTPUT_WEIGHTS_FILE = 'outputs.model'

_DTYPE = np.dtype('<f8')


class FormatError(ValueError):
    """Raised when a stored weight file cannot be used as a weight matrix."""


def weight_paths(model_dir: str) -> Tuple[str, str]:
    """
    Default (hidden, output) weight file paths inside a directory.

    Args:
        model_dir: Directory holding the model files

    Returns:
        Tuple of the hidden and output weight file paths
    """
    return (
        os.path.join(model_dir, HIDDEN_WEIGHTS_FILE),
        os.path.join(model_dir, OUTPUT_WEIGHTS_FILE)
    )


def _ensure_directory(path: str) -> None:
    """Create the parent directory of path if it doesn't exist."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)


def write_matrix(stream: BinaryIO, m: Matrix) -> None:
    """
    Encode a matrix onto a binary stream.

    Args:
        stream: Writable binary file object
        m: 2-D matrix; stored as C-ordered little-endian float64
    """
    data = np.ascontiguousarray(m, dtype=_DTYPE)
    if data.ndim != 2:
        raise ValueError(f"Only 2-D matrices can be stored, got {data.ndim}-D")
    npy_format.write_array(stream, data, allow_pickle=False)


def read_matrix(stream: BinaryIO) -> Matrix:
    """
    Decode a matrix from a binary stream.

    Args:
        stream: Readable binary file object

    Returns:
        The stored float64 matrix

    Raises:
        FormatError: If the stream is truncated, corrupt or does not hold
            a 2-D float64 array
    """
    try:
        data = npy_format.read_array(stream, allow_pickle=False)
    except (ValueError, EOFError) as e:
        raise FormatError(f"Unreadable weight matrix: {e}") from e

    if data.dtype != _DTYPE:
        raise FormatError(f"Expected float64 cells, found {data.dtype}")
    if data.ndim != 2:
        raise FormatError(f"Expected a 2-D matrix, found {data.ndim}-D")

    return np.array(data, dtype=np.float64, order='C')


def _read_weights(path: str, expected_shape: Tuple[int, int]) -> Matrix:
    with open(path, 'rb') as stream:
        try:
            weights = read_matrix(stream)
        except FormatError as e:
            raise FormatError(f"{path}: {e}") from e

    if weights.shape != expected_shape:
        raise FormatError(
            f"{path}: stored shape {weights.shape} does not match "
            f"expected {expected_shape}"
        )
    return weights


def save_weights(network, hidden_path: str, output_path: str) -> None:
    """
    Write both weight matrices of a network to disk.

    Args:
        network: Network whose weights are stored
        hidden_path: Destination of the hidden layer weights
        output_path: Destination of the output layer weights

    Raises:
        OSError: If either file cannot be created or written

    Example:
        >>> net = Network(784, 200, 10, 0.1)
        >>> save_weights(net, *weight_paths('data'))
    """
    for path, weights in (
        (hidden_path, network.hidden_weights),
        (output_path, network.output_weights)
    ):
        try:
            _ensure_directory(path)
            with open(path, 'wb') as stream:
                write_matrix(stream, weights)
        except OSError as e:
            logger.error(f"I/O error saving weights to '{path}': {e}")
            raise

    logger.info(
        f"Saved network {network.sizes} weights to "
        f"'{hidden_path}' and '{output_path}'"
    )


def load_weights(network, hidden_path: str, output_path: str) -> None:
    """
    Replace the weights of a network with the ones stored on disk.

    Both files are read and validated before the network is touched, so a
    failed load leaves the in-memory weights unchanged.

    Args:
        network: Network receiving the weights
        hidden_path: Source of the hidden layer weights
        output_path: Source of the output layer weights

    Raises:
        OSError: If either file is missing or unreadable
        FormatError: If a file is corrupt or its shape does not match the
            network

    Example:
        >>> net = Network(784, 200, 10, 0.1)
        >>> load_weights(net, *weight_paths('data'))
    """
    try:
        hidden = _read_weights(hidden_path, network.hidden_shape)
        output = _read_weights(output_path, network.output_shape)
    except OSError as e:
        logger.error(f"I/O error loading weights: {e}")
        raise
    except FormatError as e:
        logger.error(f"Format error loading weights: {e}")
        raise

    network.hidden_weights, network.output_weights = hidden, output

    logger.info(
        f"Loaded network {network.sizes} weights from "
        f"'{hidden_path}' and '{output_path}'"
    )
