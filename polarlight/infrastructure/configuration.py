import os
import tomllib
from dataclasses import dataclass
from typing import Any

from polarlight.infrastructure.datasets import DEFAULT_BASE_URL


def _load_table(config_path: str, table: str) -> dict[str, Any]:
    """
    Read one table from a TOML file.

    Parameters
    ----------
    config_path : str
        Filesystem path to a TOML file.
    table : str
        Name of the table to return.

    Returns
    -------
    dict[str, Any]
        The table's contents, or an empty dict when the table is absent.

    Raises
    ------
    FileNotFoundError
        If no file exists at `config_path`.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return data.get(table, {})


@dataclass
class DatasetConfiguration:
    """Configuration for loading and batching MNIST."""

    root: str = "raw"
    split: str = "train"
    max_samples: int | None = None
    batch_size: int = 8
    shuffle: bool = False
    download: bool = True
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        if self.split not in ("train", "test"):
            raise ValueError(f"split must be 'train' or 'test', got {self.split!r}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_samples is not None and self.max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {self.max_samples}")

    @classmethod
    def load(cls, config_path: str) -> "DatasetConfiguration":
        """
        Load dataset configuration from a TOML file.

        Parameters
        ----------
        config_path : str
            Filesystem path to a TOML file containing a "dataset" table.

        Returns
        -------
        DatasetConfiguration
            Instance populated from the "dataset" table; missing fields use their defaults.

        Raises
        ------
        FileNotFoundError
            If no file exists at `config_path`.
        """
        return cls(**_load_table(config_path, "dataset"))


@dataclass
class NetworkConfiguration:
    """Configuration for the two-layer network run over the dataset."""

    hidden_features: int = 32
    out_features: int = 10
    seed: int = 0

    def __post_init__(self):
        for name in ("hidden_features", "out_features"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @classmethod
    def load(cls, config_path: str) -> "NetworkConfiguration":
        """
        Load network configuration from a TOML file.

        Parameters:
            config_path (str): Filesystem path to a TOML file containing a "network" table.

        Returns:
            NetworkConfiguration: Instance populated from the "network" table.

        Raises:
            FileNotFoundError: If no file exists at `config_path`.
        """
        return cls(**_load_table(config_path, "network"))
