"""
CLI entry point for running a small network over MNIST batches.

Usage with config file:
    python run_inference.py -c configuration.toml

Usage with command-line args:
    python run_inference.py --root raw --split test --max-samples 64
    python run_inference.py --batch-size 16 --hidden-features 64 --seed 3
"""
import argparse
import logging

from polarlight.domain.use_cases.batch_inference import BatchInference, InferenceResult
from polarlight.infrastructure.configuration import (
    DatasetConfiguration,
    NetworkConfiguration,
)
from polarlight.infrastructure.loaders import MNISTDatasetLoader
from polarlight.infrastructure.logging import setup_logging
from polarlight.infrastructure.modules import Linear, ReLU, Sequential

logger = logging.getLogger(__name__)

MNIST_PIXELS = 28 * 28


def parse_args(argv=None):
    """
    Parse command-line arguments.

    Parameters
    ----------
    argv : list[str] | None
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Run an untrained Linear-ReLU-Linear network over MNIST and report accuracy."
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to TOML configuration file (if provided, other args are ignored)",
    )
    parser.add_argument(
        "--root",
        default="raw",
        help="Directory caching the raw MNIST files (default: raw)",
    )
    parser.add_argument(
        "--split",
        choices=["train", "test"],
        default="train",
        help="Dataset split to evaluate (default: train)",
    )
    parser.add_argument(
        "--max-samples",
        type=int,
        default=None,
        help="Maximum number of samples to use (default: all)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=8,
        help="Samples per forward pass (default: 8)",
    )
    parser.add_argument(
        "--hidden-features",
        type=int,
        default=32,
        help="Width of the hidden layer (default: 32)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for weight initialisation (default: 0)",
    )
    return parser.parse_args(argv)


def build_network(in_features: int, config: NetworkConfiguration) -> Sequential:
    """
    Build the Linear -> ReLU -> Linear network.

    Parameters
    ----------
    in_features : int
        Number of input features per sample.
    config : NetworkConfiguration
        Layer widths and seed.

    Returns
    -------
    Sequential
        The network.
    """
    return Sequential(
        Linear.build(in_features, config.hidden_features, seed=config.seed, module_name="Linear : 1"),
        ReLU(module_name="ReLU : 1"),
        Linear.build(config.hidden_features, config.out_features, seed=config.seed + 1, module_name="Linear : 2"),
    )


def run(dataset_config: DatasetConfiguration, network_config: NetworkConfiguration) -> InferenceResult:
    """
    Run batch inference with the given configuration.

    Parameters
    ----------
    dataset_config : DatasetConfiguration
        Where and how to load the data.
    network_config : NetworkConfiguration
        Shape of the network.

    Returns
    -------
    InferenceResult
        Predictions and accuracy.
    """
    dataset_loader = MNISTDatasetLoader(
        root=dataset_config.root,
        download=dataset_config.download,
        base_url=dataset_config.base_url,
    )
    network = build_network(MNIST_PIXELS, network_config)
    logger.info(f"Network:\n{network}")

    use_case = BatchInference(
        split=dataset_config.split,
        max_samples=dataset_config.max_samples,
        batch_size=dataset_config.batch_size,
        dataset_loader=dataset_loader,
        model=network,
        shuffle=dataset_config.shuffle,
        seed=network_config.seed,
    )
    return use_case.run()


def main(argv=None):
    """
    Main entry point.

    Parameters
    ----------
    argv : list[str] | None
        Command-line arguments. If None, uses sys.argv.
    """
    setup_logging()
    args = parse_args(argv)

    if args.config:
        dataset_config = DatasetConfiguration.load(args.config)
        network_config = NetworkConfiguration.load(args.config)
    else:
        dataset_config = DatasetConfiguration(
            root=args.root,
            split=args.split,
            max_samples=args.max_samples,
            batch_size=args.batch_size,
        )
        network_config = NetworkConfiguration(
            hidden_features=args.hidden_features,
            seed=args.seed,
        )

    result = run(dataset_config, network_config)
    logger.info(
        f"Processed {result.num_samples} samples in {result.num_batches} batches, "
        f"accuracy {result.accuracy:.4f}"
    )


if __name__ == "__main__":
    main()
