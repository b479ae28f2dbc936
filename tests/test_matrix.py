"""
test_matrix.py
~~~~~~~~~~~~~~

Unit tests for the matrix helpers and the sigmoid activation.
"""

import numpy as np
import pytest

from mlpnet import matrix
from mlpnet.activations import SIGMOID, sigmoid, sigmoid_prime
from mlpnet.matrix import ShapeError


@pytest.fixture
def a():
    return np.array([[1.0, 2.0], [3.0, 4.0]])


@pytest.fixture
def b():
    return np.array([[5.0, 6.0], [7.0, 8.0]])


@pytest.mark.unit
class TestMatrixHelpers:
    """Test the pure matrix operations."""

    def test_product(self, a, b):
        """Test standard matrix multiplication."""
        result = matrix.product(a, b)
        assert np.array_equal(result, [[19.0, 22.0], [43.0, 50.0]])

    def test_product_result_shape(self):
        """Test that the product has rows(a) x cols(b)."""
        result = matrix.product(np.ones((3, 2)), np.ones((2, 5)))
        assert result.shape == (3, 5)

    def test_product_shape_mismatch(self):
        """Test that incompatible inner dimensions raise ShapeError."""
        with pytest.raises(ShapeError):
            matrix.product(np.ones((3, 2)), np.ones((3, 2)))

    def test_elementwise_operations(self, a, b):
        """Test add, subtract and multiply cell by cell."""
        assert np.array_equal(matrix.add(a, b), [[6.0, 8.0], [10.0, 12.0]])
        assert np.array_equal(matrix.subtract(b, a), [[4.0, 4.0], [4.0, 4.0]])
        assert np.array_equal(matrix.multiply(a, b), [[5.0, 12.0], [21.0, 32.0]])

    @pytest.mark.parametrize('op', [matrix.add, matrix.subtract, matrix.multiply])
    def test_elementwise_shape_mismatch(self, op):
        """Test that same-shape operations reject different shapes."""
        with pytest.raises(ShapeError):
            op(np.ones((2, 2)), np.ones((2, 1)))

    def test_scale_and_add_scalar(self, a):
        """Test scalar multiplication and broadcast addition."""
        assert np.array_equal(matrix.scale(2.0, a), [[2.0, 4.0], [6.0, 8.0]])
        assert np.array_equal(matrix.add_scalar(0.5, a), [[1.5, 2.5], [3.5, 4.5]])

    def test_apply_passes_indices(self):
        """Test that apply hands row and column indices to the function."""
        result = matrix.apply(lambda r, c, v: r * 10 + c + v, np.zeros((2, 3)))
        assert np.array_equal(result, [[0.0, 1.0, 2.0], [10.0, 11.0, 12.0]])

    def test_apply_keeps_shape(self, a):
        """Test that a constant function still fills the whole matrix."""
        result = matrix.apply(lambda r, c, v: 7.0, a)
        assert result.shape == a.shape
        assert np.all(result == 7.0)

    def test_helpers_do_not_mutate_inputs(self, a, b):
        """Test that every helper leaves its arguments untouched."""
        a_copy, b_copy = a.copy(), b.copy()

        matrix.product(a, b)
        matrix.add(a, b)
        matrix.subtract(a, b)
        matrix.multiply(a, b)
        matrix.scale(3.0, a)
        matrix.add_scalar(1.0, a)
        matrix.apply(lambda r, c, v: v * 2, a)
        matrix.transpose(a)

        assert np.array_equal(a, a_copy)
        assert np.array_equal(b, b_copy)

    def test_column(self):
        """Test that a flat vector becomes an n x 1 matrix."""
        col = matrix.column([1, 2, 3])
        assert col.shape == (3, 1)
        assert col.dtype == np.float64

    def test_rejects_non_matrix(self):
        """Test that 1-D arrays are not accepted as matrices."""
        with pytest.raises(ShapeError):
            matrix.add(np.ones(3), np.ones(3))


@pytest.mark.unit
class TestSigmoid:
    """Test the sigmoid activation pair."""

    def test_known_values(self):
        """Test sigmoid at zero and its symmetry."""
        assert sigmoid(0, 0, 0.0) == pytest.approx(0.5)
        assert sigmoid(0, 0, 2.0) + sigmoid(0, 0, -2.0) == pytest.approx(1.0)

    def test_range(self):
        """Test that moderate inputs map strictly inside (0, 1)."""
        z = np.linspace(-30, 30, 61).reshape(-1, 1)
        out = matrix.apply(SIGMOID.forward, z)
        assert np.all(out > 0.0)
        assert np.all(out < 1.0)

    def test_large_negative_input(self):
        """Test that very negative inputs do not produce NaN."""
        out = matrix.apply(SIGMOID.forward, np.array([[-1000.0]]))
        assert not np.isnan(out).any()

    def test_prime_from_activation(self):
        """Test that the derivative is a * (1 - a)."""
        a = np.array([[0.5], [0.9], [0.1]])
        assert np.allclose(sigmoid_prime(a), [[0.25], [0.09], [0.09]])
