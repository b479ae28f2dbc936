"""
initializer.py
~~~~~~~~~~~~~~

Random weight initialization scaled by the fan-in of a layer.
"""

import math
import time
from typing import Optional

import numpy as np

from mlpnet.matrix import Matrix


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """
    Build a random generator.

    Args:
        seed: Fixed seed for reproducible draws; the current wall-clock
            time in nanoseconds is used when omitted

    Returns:
        numpy.random.Generator
    """
    if seed is None:
        seed = time.time_ns()
    return np.random.default_rng(seed)


# Process-wide default, seeded once at import
_default_rng = make_rng()


def random_matrix(
    rows: int,
    cols: int,
    fan_in: float,
    rng: Optional[np.random.Generator] = None
) -> Matrix:
    """
    Sample a rows x cols matrix uniformly from [-1/sqrt(fan_in), 1/sqrt(fan_in)].

    Args:
        rows: Number of rows
        cols: Number of columns
        fan_in: Number of input connections feeding the layer
        rng: Random source; the process-wide generator when omitted

    Returns:
        A new float64 matrix

    Raises:
        ValueError: If a dimension or fan_in is not positive
    """
    if rows <= 0 or cols <= 0:
        raise ValueError(f"Matrix dimensions must be positive, got {rows}x{cols}")
    if fan_in <= 0:
        raise ValueError(f"fan_in must be positive, got {fan_in}")

    bound = 1.0 / math.sqrt(fan_in)
    source = rng if rng is not None else _default_rng
    return source.uniform(-bound, bound, size=(rows, cols))
