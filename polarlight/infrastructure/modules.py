"""Concrete network modules built on Tensor operations."""
import math
from collections.abc import Iterator

import numpy

from polarlight.domain.entities.errors import ShapeMismatchError, UnimplementedError
from polarlight.domain.entities.numeric import zero_of
from polarlight.domain.entities.tensor import Tensor
from polarlight.domain.interfaces.module import Module


class Linear(Module):
    """
    Affine layer ``inputs @ weights + bias``.

    Parameters
    ----------
    in_features : int
        Size of each input row.
    out_features : int
        Size of each output row.
    weights : Tensor
        Shape ``[in_features, out_features]``.
    bias : Tensor
        Shape ``[out_features]``.
    module_name : str
        Display name.
    """

    def __init__(
        self,
        in_features: int,
        out_features: int,
        weights: Tensor,
        bias: Tensor,
        module_name: str = "Linear",
    ):
        if weights.shape != (in_features, out_features):
            raise ShapeMismatchError(
                f"Linear weights must have shape {[in_features, out_features]}, "
                f"got {list(weights.shape)}",
                weights.shape,
            )
        if bias.shape != (out_features,):
            raise ShapeMismatchError(
                f"Linear bias must have shape {[out_features]}, got {list(bias.shape)}",
                bias.shape,
            )
        self.in_features = in_features
        self.out_features = out_features
        self.weights = weights
        self.bias = bias
        self.module_name = module_name

    @classmethod
    def build(
        cls,
        in_features: int,
        out_features: int,
        seed: int | None = None,
        module_name: str = "Linear",
    ) -> "Linear":
        """
        Create a layer with weights and bias drawn uniformly from ``±1/sqrt(in_features)``.

        Parameters
        ----------
        in_features : int
            Size of each input row.
        out_features : int
            Size of each output row.
        seed : int | None
            Seed for the numpy generator.
        module_name : str
            Display name.

        Returns
        -------
        Linear
            The initialised layer.
        """
        rng = numpy.random.default_rng(seed)
        bound = 1.0 / math.sqrt(in_features)
        weights = rng.uniform(-bound, bound, size=in_features * out_features)
        bias = rng.uniform(-bound, bound, size=out_features)
        return cls(
            in_features=in_features,
            out_features=out_features,
            weights=Tensor.build([in_features, out_features], weights.tolist()),
            bias=Tensor.build([out_features], bias.tolist()),
            module_name=module_name,
        )

    def forward(self, inputs: Tensor) -> Tensor:
        """
        Apply the layer to ``[in_features]`` or ``[batch, in_features]`` inputs.

        The bias row is stacked once per batch row, since tensors do not broadcast.
        """
        if inputs.dim() == 1:
            return self.forward(inputs.unsqueeze(0)).reshape([self.out_features])
        if inputs.dim() != 2:
            raise UnimplementedError(
                f"{self.module_name} expects rank 1 or 2 inputs, got {list(inputs.shape)}",
                inputs.shape,
            )
        if inputs.shape[1] != self.in_features:
            raise ShapeMismatchError(
                f"{self.module_name} expects {self.in_features} input features, "
                f"got {list(inputs.shape)}",
                inputs.shape,
                self.weights.shape,
            )
        batch = inputs.shape[0]
        bias = Tensor.cat([self.bias.unsqueeze(0)] * batch, axis=0)
        return inputs.matmul(self.weights).add(bias)

    def parameters(self) -> Iterator[Tensor]:
        yield self.weights
        yield self.bias

    def __str__(self) -> str:
        return (
            f"module_name: {self.module_name}\n"
            f"in_features: {self.in_features}\n"
            f"out_features: {self.out_features}"
        )


class ReLU(Module):
    """Elementwise ``max(x, 0)``."""

    def __init__(self, module_name: str = "ReLU"):
        self.module_name = module_name

    def forward(self, inputs: Tensor) -> Tensor:
        return Tensor.build(
            inputs.shape,
            [value if value > 0 else zero_of(value) for value in inputs.components],
        )

    def __str__(self) -> str:
        return f"module_name: {self.module_name}"


class Sequential(Module):
    """Apply modules one after another."""

    def __init__(self, *modules: Module, module_name: str = "Sequential"):
        self.modules = list(modules)
        self.module_name = module_name

    def forward(self, inputs: Tensor) -> Tensor:
        outputs = inputs
        for module in self.modules:
            outputs = module(outputs)
        return outputs

    def parameters(self) -> Iterator[Tensor]:
        for module in self.modules:
            yield from module.parameters()

    def __str__(self) -> str:
        return "\n\n".join(str(module) for module in self.modules)
