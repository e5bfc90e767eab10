"""Tensor entity - dense N-dimensional array over a flat row-major buffer.

A tensor is an immutable value: every operation reads its operands and
returns a freshly built tensor.
"""
from __future__ import annotations

import logging
import operator
import sys
from bisect import bisect_right
from collections.abc import Callable, Iterable, Sequence
from itertools import accumulate
from typing import IO, Any, Generic, TypeVar

from polarlight.domain.entities.display import MAX_DISPLAY_RANK, format_tensor
from polarlight.domain.entities.errors import (
    IndexOutOfBoundsError,
    RankMismatchError,
    ShapeMismatchError,
    UnimplementedError,
)
from polarlight.domain.entities.numeric import AddT, DivT, MatmulT, MulT, SubT, zero_of
from polarlight.domain.entities.shape import (
    numel,
    offset,
    resolve_reshape,
    shape_pi,
    unravel,
    validate_shape,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Tensor(Generic[T]):
    """
    Dense tensor over a flat, row-major component buffer.

    Invariant: ``len(components) == product(shape)``.

    Parameters
    ----------
    shape : Sequence[int]
        Size of each axis, outermost first. Entries must be positive.
    components : Iterable[T]
        Flat values in row-major order.

    Raises
    ------
    ShapeMismatchError
        If the number of components differs from ``product(shape)``.
    """

    __slots__ = ("_shape", "_components")

    def __init__(self, shape: Sequence[int], components: Iterable[T]):
        shape = validate_shape(shape)
        components = tuple(components)
        expected = numel(shape)
        if expected != len(components):
            raise ShapeMismatchError(
                f"The length of components ({len(components)}) is not equal to "
                f"the length of shape {list(shape)} ({expected})",
                shape,
            )
        self._shape = shape
        self._components = components

    @classmethod
    def build(cls, shape: Sequence[int], components: Iterable[T]) -> Tensor[T]:
        """Build a tensor from a shape and flat row-major components."""
        return cls(shape, components)

    @property
    def shape(self) -> tuple[int, ...]:
        return self._shape

    @property
    def components(self) -> tuple[T, ...]:
        return self._components

    def dim(self) -> int:
        """Rank of the tensor."""
        return len(self._shape)

    def numel(self) -> int:
        return len(self._components)

    def get(self, index: Sequence[int]) -> T:
        """
        Read the value at a multi-index.

        Raises
        ------
        IndexOutOfBoundsError
            If the index does not address an element of this tensor.
        """
        return self._components[offset(index, self._shape)]

    # Elementwise

    def _elementwise(self, other: Tensor, op: Callable[[Any, Any], Any], name: str) -> Tensor:
        if self.dim() != other.dim():
            raise RankMismatchError(
                f"Cannot {name} tensors of rank {self.dim()} and {other.dim()}: "
                f"{list(self.shape)} vs {list(other.shape)}",
                self.shape,
                other.shape,
            )
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"Cannot {name} tensors of shape {list(self.shape)} and {list(other.shape)}",
                self.shape,
                other.shape,
            )
        return Tensor.build(self._shape, map(op, self._components, other._components))

    def add(self: Tensor[AddT], other: Tensor[AddT]) -> Tensor[AddT]:
        return self._elementwise(other, operator.add, "add")

    def sub(self: Tensor[SubT], other: Tensor[SubT]) -> Tensor[SubT]:
        return self._elementwise(other, operator.sub, "sub")

    def mul(self: Tensor[MulT], other: Tensor[MulT]) -> Tensor[MulT]:
        return self._elementwise(other, operator.mul, "mul")

    def div(self: Tensor[DivT], other: Tensor[DivT]) -> Tensor[DivT]:
        """Elementwise division; division by zero behaves as the value type does."""
        return self._elementwise(other, operator.truediv, "div")

    # Linear algebra

    def matmul(self: Tensor[MatmulT], other: Tensor[MatmulT]) -> Tensor[MatmulT]:
        """
        Matrix product of two rank-2 tensors.

        Raises
        ------
        RankMismatchError
            If the operands have different ranks.
        UnimplementedError
            If the operands are not rank 2.
        ShapeMismatchError
            If the inner dimensions disagree.
        """
        if self.dim() != other.dim():
            raise RankMismatchError(
                f"{list(self.shape)} @ {list(other.shape)}: operands have different ranks",
                self.shape,
                other.shape,
            )
        if self.dim() != 2:
            raise UnimplementedError(
                f"{list(self.shape)} @ {list(other.shape)}: matmul is only implemented for rank 2",
                self.shape,
                other.shape,
            )
        return self._matmul2d(other)

    def _matmul2d(self, other: Tensor) -> Tensor:
        if self.shape[1] != other.shape[0]:
            raise ShapeMismatchError(
                f"{list(self.shape)} @ {list(other.shape)}: inner dimensions are not equal",
                self.shape,
                other.shape,
            )
        rows, inner = self.shape
        cols = other.shape[1]
        left, right = self._components, other._components
        zero = zero_of(left[0])

        values = []
        for k in range(rows):
            row = k * inner
            for i in range(cols):
                total = zero
                for j in range(inner):
                    total = total + left[row + j] * right[j * cols + i]
                values.append(total)
        return Tensor.build((rows, cols), values)

    def transpose(self) -> Tensor[T]:
        """Swap the two axes of a rank-2 tensor."""
        if self.dim() != 2:
            raise UnimplementedError(
                f"transpose is only implemented for rank 2, got shape {list(self.shape)}",
                self.shape,
            )
        rows, cols = self.shape
        values = [self.get((j, i)) for i in range(cols) for j in range(rows)]
        return Tensor.build((cols, rows), values)

    # Shape manipulation

    def reshape(self, new_shape: Sequence[int]) -> Tensor[T]:
        """
        Reinterpret the buffer under `new_shape`; one entry may be ``-1``.

        Raises
        ------
        InvalidReshapeError
            If the target cannot be resolved.
        ShapeMismatchError
            If the resolved shape holds a different number of elements.
        """
        return Tensor.build(resolve_reshape(self._shape, new_shape), self._components)

    def unsqueeze(self, axis: int) -> Tensor[T]:
        """
        Insert a size-1 axis at `axis` (``0 <= axis <= rank``).

        Usable as ``tensor.unsqueeze(axis)`` or ``Tensor.unsqueeze(tensor, axis)``.
        """
        if not 0 <= axis <= self.dim():
            raise IndexOutOfBoundsError(
                f"Cannot unsqueeze shape {list(self.shape)} at axis {axis}",
                self.shape,
            )
        shape = self._shape[:axis] + (1,) + self._shape[axis:]
        return Tensor.build(shape, self._components)

    @staticmethod
    def cat(tensors: Sequence[Tensor[T]], axis: int) -> Tensor[T]:
        """
        Concatenate tensors along `axis`.

        All tensors must share their rank and every axis size except `axis`.
        The output size on `axis` is the sum of the inputs' sizes, so size-1
        inputs (e.g. after ``unsqueeze``) are stacked one slot per tensor.

        Each output offset is decomposed with the output strides; the
        coordinate on `axis` selects the source tensor, and the remaining
        coordinates are recomposed with that tensor's own strides.

        Raises
        ------
        UnimplementedError
            If `tensors` is empty.
        RankMismatchError
            If the tensors have different ranks.
        IndexOutOfBoundsError
            If `axis` is not an axis of the inputs.
        ShapeMismatchError
            If sizes disagree on any axis other than `axis`.
        """
        tensors = list(tensors)
        if not tensors:
            raise UnimplementedError("cat requires at least one tensor")

        first = tensors[0]
        rank = first.dim()
        for tensor in tensors[1:]:
            if tensor.dim() != rank:
                raise RankMismatchError(
                    f"cat expects tensors of equal rank, got {list(first.shape)} "
                    f"and {list(tensor.shape)}",
                    first.shape,
                    tensor.shape,
                )
        if not 0 <= axis < rank:
            raise IndexOutOfBoundsError(
                f"cat axis {axis} is out of range for rank {rank}",
                first.shape,
            )
        for tensor in tensors[1:]:
            for dim in range(rank):
                if dim != axis and tensor.shape[dim] != first.shape[dim]:
                    raise ShapeMismatchError(
                        f"cat along axis {axis}: shapes {list(first.shape)} and "
                        f"{list(tensor.shape)} differ on axis {dim}",
                        first.shape,
                        tensor.shape,
                    )

        starts = list(accumulate((tensor.shape[axis] for tensor in tensors), initial=0))
        new_shape = first.shape[:axis] + (starts[-1],) + first.shape[axis + 1:]
        new_pi = shape_pi(new_shape)
        source_pi = [shape_pi(tensor.shape) for tensor in tensors]
        logger.debug(f"cat {len(tensors)} tensors along axis {axis} -> {list(new_shape)}")

        values = []
        for idx in range(numel(new_shape)):
            index = list(unravel(idx, new_pi))
            selector = bisect_right(starts, index[axis]) - 1
            index[axis] -= starts[selector]
            source = tensors[selector]
            values.append(source._components[offset(index, source.shape, source_pi[selector])])
        return Tensor.build(new_shape, values)

    # Display

    def format(self) -> str:
        """Render the shape followed by nested bracketed rows (ranks 1 to 4)."""
        return format_tensor(self._shape, self._components)

    def print(self, file: IO[str] | None = None) -> None:
        print(self.format(), end="\n\n", file=file if file is not None else sys.stdout)

    def __str__(self) -> str:
        if 1 <= self.dim() <= MAX_DISPLAY_RANK:
            return self.format()
        return repr(self)

    def __repr__(self) -> str:
        return f"Tensor(shape={list(self._shape)}, components={list(self._components)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self._shape == other._shape and self._components == other._components

    def __hash__(self) -> int:
        return hash((self._shape, self._components))

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div
    __matmul__ = matmul
