"""
test_trainer.py
~~~~~~~~~~~~~~~

Tests for the epoch loop and the evaluation pass.
"""

import pytest

from mlpnet.mnist_loader import DatasetError
from mlpnet.trainer import EvaluationResult, evaluate_network, train_network


@pytest.mark.unit
class TestTrainNetwork:
    """Test the training loop."""

    def test_callback_per_epoch(self, toy_network, toy_csv):
        """Test that the callback fires once per epoch with progress data."""
        events = []

        elapsed = train_network(toy_network, toy_csv, 3, callback=events.append)

        assert elapsed >= 0.0
        assert [e['epoch'] for e in events] == [1, 2, 3]
        assert all(e['total_epochs'] == 3 for e in events)
        assert all(e['samples'] == 20 for e in events)

    def test_loss_decreases(self, toy_network, toy_csv):
        """Test that the epoch loss goes down on a learnable dataset."""
        events = []
        train_network(toy_network, toy_csv, 10, callback=events.append)
        assert events[-1]['loss'] < events[0]['loss']

    def test_yield_func_called(self, toy_network, tmp_path):
        """Test that the cooperative yield hook runs during long epochs."""
        path = tmp_path / "long.csv"
        path.write_text("0,255,255,0,0\n" * 250)
        calls = []

        train_network(toy_network, str(path), 1, yield_func=lambda: calls.append(1))

        assert len(calls) == 2

    def test_malformed_record_propagates(self, toy_network, tmp_path):
        """Test that a bad sample stops training with its error."""
        path = tmp_path / "bad.csv"
        path.write_text("0,255,255,0,0\n1,x,0,255,255\n")

        with pytest.raises(DatasetError):
            train_network(toy_network, str(path), 1)

    def test_missing_dataset(self, toy_network, tmp_path):
        """Test that a missing dataset raises an I/O error."""
        with pytest.raises(OSError):
            train_network(toy_network, str(tmp_path / "none.csv"), 1)

    def test_rejects_zero_epochs(self, toy_network, toy_csv):
        """Test that at least one epoch is required."""
        with pytest.raises(ValueError):
            train_network(toy_network, toy_csv, 0)


@pytest.mark.integration
class TestEvaluateNetwork:
    """Test the evaluation pass."""

    def test_learns_toy_dataset(self, toy_network, toy_csv):
        """Test that training separates two clear patterns."""
        train_network(toy_network, toy_csv, 50)

        result = evaluate_network(toy_network, toy_csv)

        assert result.total == 20
        assert result.score == 20
        assert result.accuracy == 1.0

    def test_does_not_change_weights(self, toy_network, toy_csv):
        """Test that evaluation is inference only."""
        before = toy_network.output_weights.copy()
        evaluate_network(toy_network, toy_csv)
        assert (toy_network.output_weights == before).all()

    def test_empty_dataset(self, toy_network, tmp_path):
        """Test that an empty file scores zero of zero."""
        path = tmp_path / "empty.csv"
        path.write_text("")

        result = evaluate_network(toy_network, str(path))

        assert result.total == 0
        assert result.accuracy == 0.0

    def test_result_accuracy(self):
        """Test the derived accuracy."""
        assert EvaluationResult(score=3, total=4, elapsed=0.1).accuracy == 0.75
