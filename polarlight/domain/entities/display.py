"""Nested bracket rendering of tensors."""
from collections.abc import Sequence
from typing import Any

from polarlight.domain.entities.errors import UnimplementedError

MAX_DISPLAY_RANK = 4


def _render(components: Sequence[Any], shape: Sequence[int]) -> str:
    if len(shape) == 1:
        return "[" + ", ".join(str(value) for value in components) + "]"
    step = len(components) // shape[0]
    rows = [
        _render(components[row * step:(row + 1) * step], shape[1:])
        for row in range(shape[0])
    ]
    return "[" + ", \n".join(rows) + "]"


def format_tensor(shape: Sequence[int], components: Sequence[Any]) -> str:
    """
    Render a shape line followed by the nested rows of the values.

    Parameters
    ----------
    shape : Sequence[int]
        Tensor shape, rank 1 to 4.
    components : Sequence[Any]
        Flat row-major values.

    Returns
    -------
    str
        e.g. ``"shape [2, 2]\\n[[1, 2], \\n[3, 4]]"``.

    Raises
    ------
    UnimplementedError
        If the rank is outside 1..4.
    """
    if not 1 <= len(shape) <= MAX_DISPLAY_RANK:
        raise UnimplementedError(
            f"Display is only implemented for ranks 1 to {MAX_DISPLAY_RANK}, "
            f"got shape {list(shape)}",
            shape,
        )
    return f"shape {list(shape)}\n{_render(components, shape)}"
