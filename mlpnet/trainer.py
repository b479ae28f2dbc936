"""
trainer.py
~~~~~~~~~~

Epoch loop and evaluation pass driving a Network over a dataset file.
"""

import logging
import time
from typing import Any, Callable, Dict, NamedTuple, Optional

import numpy as np

from mlpnet.mnist_loader import iter_samples
from mlpnet.network import Network

logger = logging.getLogger(__name__)

EpochCallback = Callable[[Dict[str, Any]], None]

# How many samples are processed between calls to yield_func
YIELD_EVERY = 100


class EvaluationResult(NamedTuple):
    """Outcome of an inference-only pass."""
    score: int
    total: int
    elapsed: float

    @property
    def accuracy(self) -> float:
        return self.score / self.total if self.total else 0.0


def train_network(
    network: Network,
    dataset_path: str,
    epochs: int,
    callback: Optional[EpochCallback] = None,
    yield_func: Optional[Callable[[], None]] = None
) -> float:
    """
    Train a network for a number of full passes over a dataset.

    Args:
        network: Network to update
        dataset_path: CSV or NPZ dataset
        epochs: Number of passes
        callback: Called after every epoch with a dict holding 'epoch',
            'total_epochs', 'elapsed_time', 'loss' and 'samples'
        yield_func: Called every few samples so cooperative schedulers can
            run other tasks

    Returns:
        Elapsed wall-clock seconds

    Raises:
        OSError: If the dataset cannot be read
        DatasetError: If a record is malformed
    """
    if epochs < 1:
        raise ValueError(f"epochs must be a positive integer, got {epochs}")

    start = time.perf_counter()

    for epoch in range(1, epochs + 1):
        total_error = 0.0
        count = 0
        for sample in iter_samples(
            dataset_path, network.input_size, network.output_size
        ):
            outputs = network.train(sample.inputs, sample.targets)
            diff = sample.targets - outputs.ravel()
            total_error += float(np.dot(diff, diff))
            count += 1
            if yield_func is not None and count % YIELD_EVERY == 0:
                yield_func()

        loss = total_error / count if count else 0.0
        elapsed = time.perf_counter() - start
        logger.info(
            f"Epoch {epoch}/{epochs}: {count} samples, "
            f"mean squared error {loss:.6f}, {elapsed:.2f}s elapsed"
        )

        if callback is not None:
            callback({
                'epoch': epoch,
                'total_epochs': epochs,
                'elapsed_time': elapsed,
                'loss': loss,
                'samples': count
            })

    elapsed = time.perf_counter() - start
    logger.info(f"Time taken to train: {elapsed:.2f}s")
    return elapsed


def evaluate_network(network: Network, dataset_path: str) -> EvaluationResult:
    """
    Count how many dataset samples the network classifies correctly.

    The predicted class is the index of the strongest output.

    Raises:
        OSError: If the dataset cannot be read
        DatasetError: If a record is malformed
    """
    start = time.perf_counter()
    score = 0
    total = 0

    for sample in iter_samples(
        dataset_path, network.input_size, network.output_size
    ):
        if network.classify(sample.inputs) == sample.label:
            score += 1
        total += 1

    result = EvaluationResult(score, total, time.perf_counter() - start)
    logger.info(
        f"Evaluated {total} samples: score {score} "
        f"({result.accuracy:.2%}) in {result.elapsed:.2f}s"
    )
    return result
