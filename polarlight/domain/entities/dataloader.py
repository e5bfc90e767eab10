"""Batching over a map-style Dataset."""
import logging
import math
from collections.abc import Iterator

import numpy

from polarlight.domain.entities.dataset import Dataset
from polarlight.domain.entities.tensor import Tensor

logger = logging.getLogger(__name__)


class DataLoader:
    """
    Iterate a dataset in batches of stacked tensors.

    Each batch is ``(inputs, labels)``: `inputs` stacks the items along a new
    leading axis (shape ``[B, *item.shape]``) and `labels` is a rank-1 tensor
    of length ``B``.

    Parameters
    ----------
    dataset : Dataset
        Source of (tensor, label) items. All items must share one shape.
    batch_size : int
        Items per batch.
    shuffle : bool
        Visit items in a random order drawn from a seeded numpy generator.
    seed : int | None
        Seed for the shuffle order.
    drop_last : bool
        Skip the final batch when it is smaller than `batch_size`.
    """

    def __init__(
        self,
        dataset: Dataset,
        batch_size: int = 1,
        shuffle: bool = False,
        seed: int | None = None,
        drop_last: bool = False,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.dataset = dataset
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.drop_last = drop_last
        self._rng = numpy.random.default_rng(seed)

    def __len__(self) -> int:
        if self.drop_last:
            return len(self.dataset) // self.batch_size
        return math.ceil(len(self.dataset) / self.batch_size)

    def _order(self) -> list[int]:
        if self.shuffle:
            return [int(i) for i in self._rng.permutation(len(self.dataset))]
        return list(range(len(self.dataset)))

    def __iter__(self) -> Iterator[tuple[Tensor, Tensor]]:
        order = self._order()
        for batch_index in range(len(self)):
            indices = order[batch_index * self.batch_size:(batch_index + 1) * self.batch_size]
            items = [self.dataset[idx] for idx in indices]
            inputs = Tensor.cat([item.unsqueeze(0) for item, _ in items], axis=0)
            labels = Tensor.build([len(items)], [label for _, label in items])
            logger.debug(f"Batch {batch_index}: inputs {list(inputs.shape)}")
            yield inputs, labels
