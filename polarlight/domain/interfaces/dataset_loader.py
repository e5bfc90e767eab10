from abc import ABC, abstractmethod

from polarlight.domain.entities.dataset import Dataset


class DatasetLoader(ABC):
    """Abstract interface for dataset loading."""

    @abstractmethod
    def load(self, split: str, max_samples: int | None) -> Dataset:
        """
        Load the requested split and return it as a Dataset.

        Parameters:
            split (str): Which split to load, e.g. "train" or "test".
            max_samples (int | None): Maximum number of samples to include; if None, include all available samples.

        Returns:
            Dataset: Loaded dataset of (tensor, label) pairs.
        """
        pass
