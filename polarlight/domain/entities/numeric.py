"""Numeric capabilities required by tensor operations.

Tensors hold any Python value. Each operation only requires the capability
it actually uses, e.g. ``add`` needs ``SupportsAdd`` and nothing else.
"""
from typing import Any, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class SupportsAdd(Protocol):
    def __add__(self, other: Any) -> Any: ...


@runtime_checkable
class SupportsSub(Protocol):
    def __sub__(self, other: Any) -> Any: ...


@runtime_checkable
class SupportsMul(Protocol):
    def __mul__(self, other: Any) -> Any: ...


@runtime_checkable
class SupportsDiv(Protocol):
    def __truediv__(self, other: Any) -> Any: ...


@runtime_checkable
class SupportsMatmul(SupportsAdd, SupportsMul, Protocol):
    """Values that can be accumulated in a dot product."""


AddT = TypeVar("AddT", bound=SupportsAdd)
SubT = TypeVar("SubT", bound=SupportsSub)
MulT = TypeVar("MulT", bound=SupportsMul)
DivT = TypeVar("DivT", bound=SupportsDiv)
MatmulT = TypeVar("MatmulT", bound=SupportsMatmul)


def zero_of(sample: Any) -> Any:
    """
    Return the additive identity for the type of `sample`.

    A type exposing a ``zero()`` classmethod is asked for it; otherwise the
    type is constructed from ``0`` (int, float, complex, Fraction, Decimal
    and numpy scalars all accept this).

    Parameters
    ----------
    sample : Any
        A value of the numeric type.

    Returns
    -------
    Any
        The zero of that type.
    """
    zero = getattr(type(sample), "zero", None)
    if callable(zero):
        return zero()
    return type(sample)(0)
