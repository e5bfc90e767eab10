"""Dataset entity - map-style collection of (tensor, label) pairs."""
from typing import Protocol, runtime_checkable

from polarlight.domain.entities.tensor import Tensor


@runtime_checkable
class Dataset(Protocol):
    """Map-style dataset yielding one tensor and its integer label per index."""

    def __len__(self) -> int:
        """
        Get the number of items in the dataset.

        Returns:
            int: The total number of items.
        """
        ...

    def __getitem__(self, idx: int) -> tuple[Tensor, int]:
        """
        Retrieve the item and its label at the given index.

        Parameters:
            idx (int): Index of the dataset entry to retrieve.

        Returns:
            tuple[Tensor, int]: A tuple (item, label) for the specified index.
        """
        ...
