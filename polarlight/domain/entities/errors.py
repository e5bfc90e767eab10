"""Tensor error taxonomy.

Every failing tensor operation raises one of these. Each class also derives
from the closest builtin exception so callers can catch either.
"""


class TensorError(Exception):
    """Base class for all tensor errors.

    Parameters
    ----------
    message : str
        Human-readable diagnostic.
    shapes : tuple, optional
        The offending shapes, kept for diagnostics.
    """

    def __init__(self, message: str, *shapes: tuple[int, ...]):
        super().__init__(message)
        self.shapes = tuple(tuple(shape) for shape in shapes)


class ShapeMismatchError(TensorError, ValueError):
    """Component count or axis sizes disagree with the declared shape."""


class RankMismatchError(TensorError, ValueError):
    """Operands do not have the dimensionality the operation requires."""


class InvalidReshapeError(TensorError, ValueError):
    """A reshape target cannot be resolved against the element count."""


class IndexOutOfBoundsError(TensorError, IndexError):
    """A multi-index or axis lies outside the declared shape."""


class UnimplementedError(TensorError, NotImplementedError):
    """The operation is not supported for the given rank or arguments."""
