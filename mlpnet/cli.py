"""
cli.py
~~~~~~

Command line entry point.

Usage:
    mlpnet --mnist train     # train on the training set, then save weights
    mlpnet --mnist predict   # load weights, then score the test set
"""

import argparse
import logging
import sys
from typing import List, Optional

from mlpnet.config import Settings, configure_logging, load_settings
from mlpnet.initializer import make_rng
from mlpnet.model_persistence import load_weights, save_weights, weight_paths
from mlpnet.network import Network
from mlpnet.trainer import evaluate_network, train_network

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mlpnet',
        description='Train or evaluate a one-hidden-layer network on MNIST.'
    )
    parser.add_argument(
        '--mnist', choices=['train', 'predict'],
        help='Either train or predict to evaluate neural network'
    )
    parser.add_argument('--train-file', default=settings.train_file)
    parser.add_argument('--test-file', default=settings.test_file)
    parser.add_argument('--model-dir', default=settings.model_dir,
                        help='Directory holding the weight files')
    parser.add_argument('--epochs', type=int, default=settings.epochs)
    parser.add_argument('--hidden', type=int, default=settings.hidden_size,
                        help='Number of hidden units')
    parser.add_argument('--learning-rate', type=float,
                        default=settings.learning_rate)
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the initial weights (time based if omitted)')
    return parser


def run_train(net: Network, args: argparse.Namespace) -> int:
    try:
        elapsed = train_network(net, args.train_file, args.epochs)
    except (OSError, ValueError) as e:
        print(f"Error while train network: {e}")
        return 1
    print(f"\nTime taken to train: {elapsed:.2f}s\n")

    try:
        save_weights(net, *weight_paths(args.model_dir))
    except OSError as e:
        print(f"Error while saving results: {e}")
        return 1
    return 0


def run_predict(net: Network, args: argparse.Namespace) -> int:
    try:
        load_weights(net, *weight_paths(args.model_dir))
    except (OSError, ValueError) as e:
        print(f"Error while loading weights: {e}")
        return 1

    try:
        result = evaluate_network(net, args.test_file)
    except (OSError, ValueError) as e:
        print(f"Error while predicting: {e}")
        return 1
    print(f"Time taken to check: {result.elapsed:.2f}s")
    print(f"Score: {result.score}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    configure_logging(settings)

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if args.mnist is None:
        parser.print_help()
        return 0

    net = Network(
        settings.input_size,
        args.hidden,
        settings.output_size,
        args.learning_rate,
        rng=make_rng(args.seed)
    )
    logger.info(f"Running '{args.mnist}' with {net!r}")

    if args.mnist == 'train':
        return run_train(net, args)
    return run_predict(net, args)


if __name__ == '__main__':
    sys.exit(main())
