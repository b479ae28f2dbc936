"""
network.py
~~~~~~~~~~

A feedforward network with exactly one hidden layer, trained one sample at
a time with plain gradient descent on the squared error.

Weights are stored as two matrices:
- hidden_weights maps the input column to hidden pre-activations
- output_weights maps hidden activations to output pre-activations
"""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from mlpnet import matrix
from mlpnet.activations import SIGMOID, Activation
from mlpnet.initializer import random_matrix
from mlpnet.matrix import Matrix, ShapeError

logger = logging.getLogger(__name__)


class Network:
    """
    Input -> hidden -> output network with sigmoid activations.

    Layer sizes and the learning rate are fixed at construction. The two
    weight matrices are the only mutable state; each training step computes
    both replacements and swaps them in together.
    """

    def __init__(
        self,
        input_size: int,
        hidden_size: int,
        output_size: int,
        learning_rate: float,
        rng: Optional[np.random.Generator] = None,
        activation: Activation = SIGMOID
    ):
        """
        Initialize the network with random weights.

        Args:
            input_size: Length of input vectors
            hidden_size: Number of hidden units
            output_size: Length of output vectors
            learning_rate: Step size of each gradient-descent update
            rng: Random source for the initial weights
            activation: Activation/derivative pair applied to both layers
        """
        self._input_size = input_size
        self._hidden_size = hidden_size
        self._output_size = output_size
        self._learning_rate = learning_rate
        self.activation = activation

        self.hidden_weights = random_matrix(
            hidden_size, input_size, input_size, rng=rng
        )
        self.output_weights = random_matrix(
            output_size, hidden_size, hidden_size, rng=rng
        )

        logger.debug(
            f"Created network {self.sizes} with learning rate {learning_rate}"
        )

    @property
    def input_size(self) -> int:
        return self._input_size

    @property
    def hidden_size(self) -> int:
        return self._hidden_size

    @property
    def output_size(self) -> int:
        return self._output_size

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @property
    def sizes(self) -> Tuple[int, int, int]:
        """Layer sizes as (input, hidden, output)."""
        return (self._input_size, self._hidden_size, self._output_size)

    @property
    def hidden_shape(self) -> Tuple[int, int]:
        return (self._hidden_size, self._input_size)

    @property
    def output_shape(self) -> Tuple[int, int]:
        return (self._output_size, self._hidden_size)

    def _column(self, values: Sequence[float], length: int, what: str) -> Matrix:
        col = matrix.column(values)
        if col.shape[0] != length:
            raise ShapeError(
                f"Expected {what} vector of length {length}, got {col.shape[0]}"
            )
        return col

    def _forward(self, inputs: Matrix) -> Tuple[Matrix, Matrix]:
        """Return (hidden, output) activations for an input column."""
        hidden_inputs = matrix.product(self.hidden_weights, inputs)
        hidden_outputs = matrix.apply(self.activation.forward, hidden_inputs)
        final_inputs = matrix.product(self.output_weights, hidden_outputs)
        final_outputs = matrix.apply(self.activation.forward, final_inputs)
        return hidden_outputs, final_outputs

    def predict(self, input_data: Sequence[float]) -> Matrix:
        """
        Run a forward pass.

        Args:
            input_data: input_size numbers

        Returns:
            output_size x 1 matrix of activations in (0, 1)

        Raises:
            ShapeError: If the input has the wrong length
        """
        inputs = self._column(input_data, self._input_size, 'input')
        _, outputs = self._forward(inputs)
        return outputs

    def classify(self, input_data: Sequence[float]) -> int:
        """Index of the strongest output (the first one on ties)."""
        return int(np.argmax(self.predict(input_data)))

    def squared_error(
        self,
        input_data: Sequence[float],
        target_data: Sequence[float]
    ) -> float:
        """Sum of squared differences between target and prediction."""
        targets = self._column(target_data, self._output_size, 'target')
        diff = matrix.subtract(targets, self.predict(input_data))
        return float(np.sum(matrix.multiply(diff, diff)))

    def train(
        self,
        input_data: Sequence[float],
        target_data: Sequence[float]
    ) -> Matrix:
        """
        Update both weight matrices from a single (input, target) sample.

        The hidden error is the output error sent back through the output
        weights as is; the output activation derivative is applied only to
        the output-layer gradient.

        Args:
            input_data: input_size numbers
            target_data: output_size desired activations

        Returns:
            The output activations computed before the update

        Raises:
            ShapeError: If either vector has the wrong length
        """
        inputs = self._column(input_data, self._input_size, 'input')
        targets = self._column(target_data, self._output_size, 'target')

        hidden_outputs, final_outputs = self._forward(inputs)

        output_errors = matrix.subtract(targets, final_outputs)
        hidden_errors = matrix.product(
            matrix.transpose(self.output_weights), output_errors
        )

        derivative = self.activation.derivative
        output_grad = matrix.product(
            matrix.multiply(output_errors, derivative(final_outputs)),
            matrix.transpose(hidden_outputs)
        )
        hidden_grad = matrix.product(
            matrix.multiply(hidden_errors, derivative(hidden_outputs)),
            matrix.transpose(inputs)
        )

        new_output = matrix.add(
            self.output_weights, matrix.scale(self._learning_rate, output_grad)
        )
        new_hidden = matrix.add(
            self.hidden_weights, matrix.scale(self._learning_rate, hidden_grad)
        )
        self.output_weights, self.hidden_weights = new_output, new_hidden

        return final_outputs

    def __repr__(self) -> str:
        return (
            f"Network(input_size={self._input_size}, "
            f"hidden_size={self._hidden_size}, "
            f"output_size={self._output_size}, "
            f"learning_rate={self._learning_rate})"
        )
