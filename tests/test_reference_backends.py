"""Cross-checks of tensor operations against numpy and torch."""
import numpy as np
import pytest
import torch

from polarlight.domain.entities.tensor import Tensor


def _from_numpy(array: np.ndarray) -> Tensor:
    return Tensor.build(list(array.shape), array.ravel().tolist())


def _to_numpy(tensor: Tensor) -> np.ndarray:
    return np.array(tensor.components).reshape(tensor.shape)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


class TestAgainstNumpy:
    """Results agree with numpy on random integer data."""

    def test_matmul(self, rng):
        a = rng.integers(-9, 10, size=(4, 7))
        b = rng.integers(-9, 10, size=(7, 3))
        np.testing.assert_array_equal(_to_numpy(_from_numpy(a).matmul(_from_numpy(b))), a @ b)

    def test_transpose(self, rng):
        a = rng.integers(-9, 10, size=(5, 2))
        np.testing.assert_array_equal(_to_numpy(_from_numpy(a).transpose()), a.T)

    def test_reshape_with_inferred_axis(self, rng):
        a = rng.integers(0, 100, size=(3, 4, 2))
        result = _from_numpy(a).reshape([4, -1])
        np.testing.assert_array_equal(_to_numpy(result), a.reshape(4, -1))

    @pytest.mark.parametrize("axis", [0, 1, 2])
    def test_concatenate_each_axis(self, rng, axis):
        sizes = [1, 3, 2]
        arrays = []
        for size in sizes:
            shape = [2, 3, 4]
            shape[axis] = size
            arrays.append(rng.integers(0, 100, size=shape))
        result = Tensor.cat([_from_numpy(array) for array in arrays], axis)
        np.testing.assert_array_equal(_to_numpy(result), np.concatenate(arrays, axis=axis))

    def test_get_matches_numpy_indexing(self, rng):
        a = rng.integers(0, 100, size=(2, 3, 4))
        tensor = _from_numpy(a)
        for index in np.ndindex(*a.shape):
            assert tensor.get(list(index)) == a[index]


class TestAgainstTorch:
    """Stacking and elementwise ops agree with torch."""

    def test_stack_matches_torch_stack(self):
        a = torch.arange(6.0).reshape(2, 3)
        b = torch.arange(6.0, 12.0).reshape(2, 3)
        ours = Tensor.cat(
            [
                Tensor.build([2, 3], a.flatten().tolist()).unsqueeze(2),
                Tensor.build([2, 3], b.flatten().tolist()).unsqueeze(2),
            ],
            2,
        )
        expected = torch.stack([a, b], dim=2)
        assert list(ours.shape) == list(expected.shape)
        assert list(ours.components) == expected.flatten().tolist()

    def test_elementwise_matches_torch(self):
        a = torch.tensor([[1.5, -2.0], [3.25, 4.0]])
        b = torch.tensor([[0.5, 4.0], [-1.0, 8.0]])
        ta = Tensor.build([2, 2], a.flatten().tolist())
        tb = Tensor.build([2, 2], b.flatten().tolist())
        for ours, theirs in [
            (ta.add(tb), a + b),
            (ta.sub(tb), a - b),
            (ta.mul(tb), a * b),
            (ta.div(tb), a / b),
        ]:
            assert list(ours.components) == pytest.approx(theirs.flatten().tolist())

    def test_matmul_matches_torch(self):
        a = torch.arange(1.0, 7.0).reshape(2, 3)
        b = torch.arange(1.0, 13.0).reshape(3, 4)
        ours = Tensor.build([2, 3], a.flatten().tolist()).matmul(
            Tensor.build([3, 4], b.flatten().tolist())
        )
        assert list(ours.components) == pytest.approx((a @ b).flatten().tolist())
