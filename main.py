"""
Demonstration of the tensor API.

Usage:
    python main.py
    python main.py --verbose
"""
import argparse
import logging

from polarlight.domain.entities.errors import TensorError
from polarlight.domain.entities.tensor import Tensor
from polarlight.infrastructure.logging import setup_logging
from polarlight.infrastructure.modules import Linear, ReLU

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Print the results of a tour through the tensor operations."
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging of shape inference and concatenation",
    )
    return parser.parse_args(argv)


def demo_tensor_ops() -> None:
    """Build a few tensors and print every operation applied to them."""
    t = Tensor.build([2, 2, 3], [float(i) for i in range(1, 13)])
    a = Tensor.build([2, 3], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    b = Tensor.build([2, 3], [7.0, 8.0, 9.0, 10.0, 11.0, 12.0])
    m = Tensor.build([3, 4], [float(i) for i in range(1, 13)])

    results = {
        "a + b": a.add(b),
        "a - b": a.sub(b),
        "a / b": a.div(b),
        "a * b": a.mul(b),
        "a @ m": a.matmul(m),
        "a^T": a.transpose(),
        "a @ b^T": a.matmul(b.transpose()),
        "t.reshape([12])": t.reshape([12]),
        "t.reshape([2, -1])": t.reshape([2, -1]),
        "unsqueeze(a, 2)": Tensor.unsqueeze(a, 2),
        "unsqueeze(b, 2)": Tensor.unsqueeze(b, 2),
        "cat([a, b], 2)": Tensor.cat([Tensor.unsqueeze(a, 2), Tensor.unsqueeze(b, 2)], 2),
    }
    for name, result in results.items():
        print(name)
        result.print()

    try:
        t.reshape([-1, -1, 2])
    except TensorError as error:
        logger.info(f"Rejected reshape: {error}")


def demo_modules() -> None:
    """Show the string form of a few modules and run a forward pass."""
    weights = Tensor.build([2, 2], [1.0, 2.0, 3.0, 4.0])
    bias = Tensor.build([2], [0.5, 0.5])
    linear1 = Linear(2, 2, weights, bias, module_name="Linear : 1")
    print(f"{linear1}\n")

    linear2 = Linear.build(3, 3, seed=0)
    print(f"{linear2}\n")

    relu = ReLU(module_name="ReLU : 1")
    print(f"{relu}\n")

    relu(linear1(Tensor.build([1, 2], [1.0, -1.0]))).print()


def main(argv=None):
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    demo_tensor_ops()
    demo_modules()


if __name__ == "__main__":
    main()
