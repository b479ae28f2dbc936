"""
config.py
~~~~~~~~~

Environment-driven settings and logging setup.
"""

import os
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class Settings:
    """Runtime configuration; defaults mirror the classic MNIST setup."""

    train_file: str = 'mnist_dataset/mnist_train.csv'
    test_file: str = 'mnist_dataset/mnist_test.csv'
    model_dir: str = 'data'
    epochs: int = 5
    input_size: int = 784
    hidden_size: int = 200
    output_size: int = 10
    learning_rate: float = 0.1
    log_level: str = 'INFO'
    port: int = 8000
    production: bool = False


def _read(
    env: Mapping[str, str],
    name: str,
    convert: Callable[[str], T],
    default: T
) -> T:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from; os.environ when omitted

    Returns:
        Settings

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    if env is None:
        env = os.environ
    defaults = Settings()

    return Settings(
        train_file=_read(env, 'MLPNET_TRAIN_FILE', str, defaults.train_file),
        test_file=_read(env, 'MLPNET_TEST_FILE', str, defaults.test_file),
        model_dir=_read(env, 'MLPNET_MODEL_DIR', str, defaults.model_dir),
        epochs=_read(env, 'MLPNET_EPOCHS', int, defaults.epochs),
        input_size=_read(env, 'MLPNET_INPUT_SIZE', int, defaults.input_size),
        hidden_size=_read(env, 'MLPNET_HIDDEN_SIZE', int, defaults.hidden_size),
        output_size=_read(env, 'MLPNET_OUTPUT_SIZE', int, defaults.output_size),
        learning_rate=_read(
            env, 'MLPNET_LEARNING_RATE', float, defaults.learning_rate
        ),
        log_level=_read(env, 'LOG_LEVEL', str, defaults.log_level).upper(),
        port=_read(env, 'PORT', int, defaults.port),
        production=env.get('FLASK_ENV') == 'production'
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Set up logging based on environment.

    - In production: quiet third-party server logs, keep ours at INFO
    - In development: show everything at the configured level
    """
    if settings is None:
        settings = load_settings()
    log_level = getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if settings.production:
        for logger_name in ['socketio', 'engineio', 'engineio.server',
                            'socketio.server', 'werkzeug']:
            logging.getLogger(logger_name).setLevel(logging.WARNING)
        logging.getLogger('mlpnet').setLevel(logging.INFO)
