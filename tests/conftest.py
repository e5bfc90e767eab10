"""Pytest configuration and shared fixtures."""
import pytest
from fixtures.fake_dataset import FakeDatasetLoader, make_items

from polarlight.domain.entities.tensor import Tensor


@pytest.fixture
def cube():
    """
    Provide a 2x2x3 tensor holding 1..12 in row-major order.

    Returns:
        Tensor: shape [2, 2, 3].
    """
    return Tensor.build([2, 2, 3], [float(i) for i in range(1, 13)])


@pytest.fixture
def left():
    """A 2x3 tensor holding 1..6."""
    return Tensor.build([2, 3], [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])


@pytest.fixture
def right():
    """A 2x3 tensor holding 7..12."""
    return Tensor.build([2, 3], [7.0, 8.0, 9.0, 10.0, 11.0, 12.0])


@pytest.fixture
def wide():
    """A 3x4 tensor holding 1..12."""
    return Tensor.build([3, 4], [float(i) for i in range(1, 13)])


@pytest.fixture
def fake_loader():
    """
    Provide a FakeDatasetLoader over ten 2x2 items.

    Returns:
        FakeDatasetLoader: items i = 0..9 filled with i, labelled i.
    """
    return FakeDatasetLoader(make_items(10))
