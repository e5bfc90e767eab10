from polarlight.domain.entities.dataset import Dataset
from polarlight.domain.interfaces.dataset_loader import DatasetLoader
from polarlight.infrastructure.datasets import DEFAULT_BASE_URL, load_dataset


class MNISTDatasetLoader(DatasetLoader):
    """Concrete implementation for loading MNIST from a local cache directory."""

    def __init__(self, root: str = "raw", download: bool = True, base_url: str = DEFAULT_BASE_URL):
        self.root = root
        self.download = download
        self.base_url = base_url

    def load(self, split: str, max_samples: int | None) -> Dataset:
        """
        Load the requested MNIST split and return it as a Dataset.

        Parameters:
            split (str): "train" or "test".
            max_samples (int | None): Maximum number of samples to load; None to load all available samples.

        Returns:
            Dataset: Loaded dataset of (image tensor, label) pairs.
        """
        return load_dataset(
            self.root,
            split=split,
            max_samples=max_samples,
            download=self.download,
            base_url=self.base_url,
        )
