"""
matrix.py
~~~~~~~~~

Small matrix algebra helpers over two-dimensional float64 numpy arrays.

Every helper returns a newly allocated matrix and leaves its arguments
untouched. Shape mismatches raise ShapeError.
"""

from typing import Callable, Sequence, Union

import numpy as np

Matrix = np.ndarray
CellFunction = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]


class ShapeError(ValueError):
    """Raised when matrix dimensions are incompatible for an operation."""


def _as_matrix(m: Union[Matrix, Sequence[Sequence[float]]]) -> Matrix:
    """Coerce the argument into a 2-D float64 array."""
    a = np.asarray(m, dtype=np.float64)
    if a.ndim != 2:
        raise ShapeError(f"Expected a 2-D matrix, got {a.ndim} dimension(s)")
    return a


def _require_same_shape(a: Matrix, b: Matrix, op: str) -> None:
    if a.shape != b.shape:
        raise ShapeError(
            f"Cannot {op} matrices of shape {a.shape} and {b.shape}"
        )


def column(values: Sequence[float]) -> Matrix:
    """
    Turn a flat vector into an n x 1 column matrix.

    Args:
        values: Sequence (or array) of numbers

    Returns:
        A new float64 array of shape (len(values), 1)
    """
    return np.array(values, dtype=np.float64).reshape(-1, 1)


def transpose(m: Matrix) -> Matrix:
    """Return a transposed copy of m."""
    return _as_matrix(m).T.copy()


def product(m: Matrix, n: Matrix) -> Matrix:
    """
    Standard matrix multiplication.

    Args:
        m: Matrix of shape (r, k)
        n: Matrix of shape (k, c)

    Returns:
        Matrix of shape (r, c)

    Raises:
        ShapeError: If the inner dimensions disagree
    """
    a, b = _as_matrix(m), _as_matrix(n)
    if a.shape[1] != b.shape[0]:
        raise ShapeError(
            f"Cannot multiply matrices of shape {a.shape} and {b.shape}"
        )
    return np.dot(a, b)


def apply(fn: CellFunction, m: Matrix) -> Matrix:
    """
    Substitute fn(row, col, value) at every cell of m.

    fn receives integer index grids for the rows and columns together with
    the cell values, so any function built from numpy operations is
    evaluated over the whole matrix in one call. Wrap scalar-only functions
    in np.vectorize.

    Args:
        fn: Callable taking (row, col, value)
        m: Input matrix

    Returns:
        A matrix of the same shape as m
    """
    a = _as_matrix(m)
    rows, cols = np.indices(a.shape)
    out = np.asarray(fn(rows, cols, a.copy()), dtype=np.float64)
    if out.shape != a.shape:
        out = np.broadcast_to(out, a.shape).copy()
    return out


def scale(s: float, m: Matrix) -> Matrix:
    """Multiply every cell of m by the scalar s."""
    return s * _as_matrix(m)


def multiply(m: Matrix, n: Matrix) -> Matrix:
    """Elementwise (Hadamard) product of two same-shape matrices."""
    a, b = _as_matrix(m), _as_matrix(n)
    _require_same_shape(a, b, 'multiply')
    return a * b


def add(m: Matrix, n: Matrix) -> Matrix:
    """Elementwise sum of two same-shape matrices."""
    a, b = _as_matrix(m), _as_matrix(n)
    _require_same_shape(a, b, 'add')
    return a + b


def subtract(m: Matrix, n: Matrix) -> Matrix:
    """Elementwise difference m - n of two same-shape matrices."""
    a, b = _as_matrix(m), _as_matrix(n)
    _require_same_shape(a, b, 'subtract')
    return a - b


def add_scalar(s: float, m: Matrix) -> Matrix:
    """Add the scalar s to every cell of m."""
    a = _as_matrix(m)
    return add(a, np.full(a.shape, s, dtype=np.float64))
