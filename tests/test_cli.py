"""
test_cli.py
~~~~~~~~~~~

Tests for the command line entry point and configuration loading.
"""

import os

import pytest

from mlpnet import cli
from mlpnet.config import Settings, load_settings
from mlpnet.model_persistence import weight_paths


@pytest.fixture
def toy_env(monkeypatch):
    """Point the configured layer sizes at the toy dataset."""
    monkeypatch.setenv('MLPNET_INPUT_SIZE', '4')
    monkeypatch.setenv('MLPNET_OUTPUT_SIZE', '2')


@pytest.mark.unit
class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self):
        """Test that an empty environment gives the classic MNIST setup."""
        settings = load_settings({})
        assert settings == Settings()
        assert (settings.input_size, settings.hidden_size, settings.output_size) == (784, 200, 10)
        assert settings.learning_rate == 0.1

    def test_overrides(self):
        """Test that variables override the defaults."""
        settings = load_settings({
            'MLPNET_EPOCHS': '2',
            'MLPNET_LEARNING_RATE': '0.3',
            'MLPNET_MODEL_DIR': '/tmp/models',
            'LOG_LEVEL': 'debug',
            'FLASK_ENV': 'production'
        })
        assert settings.epochs == 2
        assert settings.learning_rate == 0.3
        assert settings.model_dir == '/tmp/models'
        assert settings.log_level == 'DEBUG'
        assert settings.production is True

    def test_invalid_number(self):
        """Test that unparsable numbers name the variable."""
        with pytest.raises(ValueError) as exc_info:
            load_settings({'MLPNET_EPOCHS': 'many'})
        assert 'MLPNET_EPOCHS' in str(exc_info.value)


@pytest.mark.integration
class TestCli:
    """Test the train and predict commands."""

    def test_no_command_prints_help(self, capsys):
        """Test that running without --mnist shows usage."""
        assert cli.main([]) == 0
        assert '--mnist' in capsys.readouterr().out

    def test_train_then_predict(self, toy_env, toy_csv, tmp_path, capsys):
        """Test that trained weights are saved and then scored."""
        model_dir = str(tmp_path / "model")
        common = ['--model-dir', model_dir, '--hidden', '4']

        code = cli.main(['--mnist', 'train', '--train-file', toy_csv,
                         '--epochs', '50', '--learning-rate', '0.5',
                         '--seed', '7'] + common)
        assert code == 0
        for path in weight_paths(model_dir):
            assert os.path.exists(path)
        assert 'Time taken to train' in capsys.readouterr().out

        code = cli.main(['--mnist', 'predict', '--test-file', toy_csv] + common)
        out = capsys.readouterr().out
        assert code == 0
        assert 'Time taken to check' in out
        assert 'Score: 20' in out

    def test_predict_without_weights(self, toy_env, toy_csv, tmp_path, capsys):
        """Test that a missing model is reported and fails the run."""
        code = cli.main(['--mnist', 'predict', '--test-file', toy_csv,
                         '--model-dir', str(tmp_path / "missing")])

        assert code == 1
        assert 'Error while loading weights' in capsys.readouterr().out

    def test_train_with_missing_dataset(self, toy_env, tmp_path, capsys):
        """Test that a missing training file is reported."""
        code = cli.main(['--mnist', 'train',
                         '--train-file', str(tmp_path / "none.csv"),
                         '--model-dir', str(tmp_path / "model")])

        assert code == 1
        assert 'Error while train network' in capsys.readouterr().out
