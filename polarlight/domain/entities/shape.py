"""Shape/index engine.

Pure functions over row-major shapes: element counts, stride
(partial-product) tables, flat offsets and their inverse.
"""
import logging
import operator
from collections.abc import Sequence

from polarlight.domain.entities.errors import (
    IndexOutOfBoundsError,
    InvalidReshapeError,
    ShapeMismatchError,
)

logger = logging.getLogger(__name__)

INFERRED = -1


def _as_index(value) -> int | None:
    """Return `value` as a plain int, or None for bools and non-integers."""
    if isinstance(value, bool):
        return None
    try:
        return operator.index(value)
    except TypeError:
        return None


def validate_shape(shape: Sequence[int]) -> tuple[int, ...]:
    """
    Normalize `shape` to a tuple of positive ints.

    Raises
    ------
    ShapeMismatchError
        If any entry is not a positive integer.
    """
    given = tuple(shape)
    normalized = []
    for entry in given:
        size = _as_index(entry)
        if size is None or size <= 0:
            raise ShapeMismatchError(
                f"Shape {list(given)} must contain positive integers only",
                given,
            )
        normalized.append(size)
    return tuple(normalized)


def numel(shape: Sequence[int]) -> int:
    """Number of elements described by `shape` (1 for an empty shape)."""
    count = 1
    for size in shape:
        count *= size
    return count


def shape_pi(shape: Sequence[int]) -> tuple[int, ...]:
    """
    Compute the partial-product table of `shape`.

    ``shape_pi[rank - 1] == 1`` and ``shape_pi[i] == shape[i + 1] * shape_pi[i + 1]``,
    which are exactly the row-major strides.

    Parameters
    ----------
    shape : Sequence[int]
        The shape to compute strides for.

    Returns
    -------
    tuple[int, ...]
        One stride per axis, outermost first.
    """
    rank = len(shape)
    strides = [1] * rank
    for i in range(rank - 2, -1, -1):
        strides[i] = shape[i + 1] * strides[i + 1]
    return tuple(strides)


def offset(index: Sequence[int], shape: Sequence[int], strides: Sequence[int] | None = None) -> int:
    """
    Convert a multi-index into a flat row-major offset.

    Parameters
    ----------
    index : Sequence[int]
        One coordinate per axis.
    shape : Sequence[int]
        The shape the index refers to.
    strides : Sequence[int] | None
        Precomputed ``shape_pi(shape)``; computed when omitted.

    Returns
    -------
    int
        Position in the flat buffer.

    Raises
    ------
    IndexOutOfBoundsError
        If the index has the wrong length or any coordinate is outside
        ``[0, shape[axis])``.
    """
    if len(index) != len(shape):
        raise IndexOutOfBoundsError(
            f"Index {list(index)} has {len(index)} coordinates but shape "
            f"{list(shape)} has rank {len(shape)}",
            shape,
        )
    if strides is None:
        strides = shape_pi(shape)

    flat = 0
    for axis, (entry, size, stride) in enumerate(zip(index, shape, strides)):
        coordinate = _as_index(entry)
        if coordinate is None:
            raise IndexOutOfBoundsError(
                f"Index {list(index)} has non-integer coordinate {entry!r} on axis {axis}",
                shape,
            )
        if not 0 <= coordinate < size:
            raise IndexOutOfBoundsError(
                f"Index {list(index)} is out of bounds for shape {list(shape)} "
                f"on axis {axis}",
                shape,
            )
        flat += coordinate * stride
    return flat


def unravel(flat: int, strides: Sequence[int]) -> tuple[int, ...]:
    """
    Decompose a flat offset into a multi-index using a stride table.

    Parameters
    ----------
    flat : int
        Position in the flat buffer.
    strides : Sequence[int]
        The ``shape_pi`` table of the shape the offset belongs to.

    Returns
    -------
    tuple[int, ...]
        One coordinate per axis.
    """
    index = []
    remainder = flat
    for stride in strides:
        coordinate, remainder = divmod(remainder, stride)
        index.append(coordinate)
    return tuple(index)


def resolve_reshape(shape: Sequence[int], new_shape: Sequence[int]) -> tuple[int, ...]:
    """
    Resolve a reshape target that may contain one inferred axis.

    Parameters
    ----------
    shape : Sequence[int]
        Current shape.
    new_shape : Sequence[int]
        Target shape; at most one entry may be ``-1``.

    Returns
    -------
    tuple[int, ...]
        The target shape with the inferred axis filled in. Total element
        count is not checked here when nothing is inferred; ``Tensor.build``
        does that.

    Raises
    ------
    InvalidReshapeError
        If more than one axis is inferred, an entry is neither ``-1`` nor
        positive, or the known sizes do not divide the element count.
    """
    given = tuple(new_shape)
    target = []
    for entry in given:
        size = _as_index(entry)
        if size is None or (size <= 0 and size != INFERRED):
            raise InvalidReshapeError(
                f"Cannot reshape {list(shape)} to {list(given)}: "
                f"invalid dimension {entry!r}",
                shape,
                given,
            )
        target.append(size)
    target = tuple(target)

    inferred = [axis for axis, size in enumerate(target) if size == INFERRED]
    if len(inferred) > 1:
        raise InvalidReshapeError(
            f"Cannot reshape {list(shape)} to {list(target)}: "
            "only one dimension can be inferred",
            shape,
            target,
        )
    if not inferred:
        return target

    total = numel(shape)
    known = numel(size for size in target if size != INFERRED)
    if total % known != 0:
        raise InvalidReshapeError(
            f"Cannot reshape {list(shape)} ({total} elements) to {list(target)}: "
            f"{total} is not divisible by {known}",
            shape,
            target,
        )

    axis = inferred[0]
    resolved = target[:axis] + (total // known,) + target[axis + 1:]
    logger.debug(f"Inferred axis {axis} of {list(target)} as {total // known}")
    return resolved
