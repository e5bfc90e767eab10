"""Tests for MNIST download, caching and IDX decoding."""
import gzip
import struct
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import requests

from polarlight.domain.entities.dataset import Dataset
from polarlight.domain.interfaces.dataset_loader import DatasetLoader
from polarlight.infrastructure.datasets import (
    MNIST_RESOURCES,
    MNISTDatasetAdapter,
    download_from_url,
    idx_to_tensor,
    load_dataset,
    read_idx,
)
from polarlight.infrastructure.loaders import MNISTDatasetLoader


def make_idx(array: np.ndarray, type_code: int = 0x08) -> bytes:
    """Encode `array` in the IDX format."""
    dtypes = {0x08: ">u1", 0x0B: ">i2", 0x0D: ">f4"}
    header = bytes([0, 0, type_code, array.ndim])
    header += b"".join(struct.pack(">I", size) for size in array.shape)
    return header + array.astype(dtypes[type_code]).tobytes()


def write_split(root, split: str, count: int = 3) -> None:
    """Write a tiny decompressed MNIST split of 2x2 images into `root`."""
    images = np.arange(count * 4, dtype=np.uint8).reshape(count, 2, 2) * 10
    labels = np.arange(count, dtype=np.uint8)
    image_name, label_name = MNIST_RESOURCES[split]
    (root / image_name).write_bytes(make_idx(images))
    (root / label_name).write_bytes(make_idx(labels))


def fake_response(payload: bytes) -> MagicMock:
    response = MagicMock()
    response.headers = {"content-length": str(len(payload))}
    response.iter_content.return_value = [payload[:5], payload[5:]]
    response.raise_for_status.return_value = None
    return response


class TestReadIdx:
    """Tests for IDX decoding."""

    def test_reads_unsigned_bytes(self):
        array = np.arange(6, dtype=np.uint8).reshape(2, 3)
        np.testing.assert_array_equal(read_idx(make_idx(array)), array)

    def test_reads_big_endian_shorts(self):
        array = np.array([-300, 5, 1024], dtype=np.int16)
        np.testing.assert_array_equal(read_idx(make_idx(array, 0x0B)), array)

    def test_reads_floats(self):
        array = np.array([[0.5, -1.25]], dtype=np.float32)
        np.testing.assert_array_equal(read_idx(make_idx(array, 0x0D)), array)

    def test_rejects_bad_magic(self):
        with pytest.raises(ValueError, match="magic"):
            read_idx(b"\x01\x00\x08\x01\x00\x00\x00\x01\x00")

    def test_rejects_unknown_type(self):
        with pytest.raises(ValueError, match="type code"):
            read_idx(b"\x00\x00\x07\x01\x00\x00\x00\x01\x00")

    def test_rejects_truncated_header(self):
        with pytest.raises(ValueError, match="header"):
            read_idx(b"\x00\x00\x08\x02\x00\x00\x00\x01")

    def test_rejects_truncated_payload(self):
        raw = make_idx(np.arange(4, dtype=np.uint8))
        with pytest.raises(ValueError, match="payload"):
            read_idx(raw[:-1])

    def test_idx_to_tensor(self):
        array = np.arange(6, dtype=np.uint8).reshape(3, 2)
        tensor = idx_to_tensor(make_idx(array))
        assert tensor.shape == (3, 2)
        assert tensor.get([2, 1]) == 5


class TestDownloadFromUrl:
    """Tests for download_from_url and its disk cache."""

    def test_downloads_and_decompresses(self, tmp_path):
        payload = b"hello idx"
        with patch("polarlight.infrastructure.datasets.requests.get") as get:
            get.return_value = fake_response(gzip.compress(payload))
            path = download_from_url(str(tmp_path / "cache"), "file", "http://example/file.gz")

        assert open(path, "rb").read() == payload
        get.assert_called_once()
        assert get.call_args.args[0] == "http://example/file.gz"

    def test_keeps_raw_bytes_without_decompress(self, tmp_path):
        with patch("polarlight.infrastructure.datasets.requests.get") as get:
            get.return_value = fake_response(b"0123456789")
            path = download_from_url(str(tmp_path), "file", "http://example/file", decompress=False)
        assert open(path, "rb").read() == b"0123456789"

    def test_skips_download_when_cached(self, tmp_path):
        (tmp_path / "file").write_bytes(b"cached")
        with patch("polarlight.infrastructure.datasets.requests.get") as get:
            path = download_from_url(str(tmp_path), "file", "http://example/file.gz")
        get.assert_not_called()
        assert open(path, "rb").read() == b"cached"

    def test_propagates_http_errors(self, tmp_path):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404")
        with patch("polarlight.infrastructure.datasets.requests.get", return_value=response):
            with pytest.raises(requests.HTTPError):
                download_from_url(str(tmp_path), "file", "http://example/file.gz")
        assert not (tmp_path / "file").exists()


class TestMNISTDataset:
    """Tests for the MNIST adapter, load_dataset and the loader."""

    def test_adapter_items_are_scaled_tensors(self):
        images = np.array([[[0, 255], [51, 102]]], dtype=np.uint8)
        dataset = MNISTDatasetAdapter(images, np.array([7], dtype=np.uint8))

        image, label = dataset[0]
        assert isinstance(dataset, Dataset)
        assert len(dataset) == 1
        assert label == 7
        assert image.shape == (2, 2)
        assert image.components == pytest.approx((0.0, 1.0, 0.2, 0.4))
        assert dataset.image_size == (2, 2)

    def test_adapter_rejects_count_mismatch(self):
        with pytest.raises(ValueError):
            MNISTDatasetAdapter(np.zeros((2, 2, 2), dtype=np.uint8), np.zeros(3, dtype=np.uint8))

    def test_load_from_cache_without_download(self, tmp_path):
        write_split(tmp_path, "test", count=3)
        dataset = load_dataset(str(tmp_path), split="test", download=False)
        assert len(dataset) == 3
        assert dataset[2][1] == 2

    def test_load_limits_samples(self, tmp_path):
        write_split(tmp_path, "train", count=5)
        dataset = load_dataset(str(tmp_path), split="train", max_samples=2, download=False)
        assert len(dataset) == 2

    def test_load_missing_file_without_download(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_dataset(str(tmp_path), split="train", download=False)

    def test_load_unknown_split(self, tmp_path):
        with pytest.raises(ValueError):
            load_dataset(str(tmp_path), split="validation")

    def test_loader_implements_interface(self, tmp_path):
        write_split(tmp_path, "test", count=4)
        loader = MNISTDatasetLoader(root=str(tmp_path), download=False)
        assert isinstance(loader, DatasetLoader)
        assert len(loader.load("test", 3)) == 3

    def test_loader_downloads_from_base_url(self, tmp_path):
        images = np.zeros((1, 2, 2), dtype=np.uint8)
        labels = np.array([4], dtype=np.uint8)
        payloads = {
            "http://mirror/t10k-images-idx3-ubyte.gz": gzip.compress(make_idx(images)),
            "http://mirror/t10k-labels-idx1-ubyte.gz": gzip.compress(make_idx(labels)),
        }
        with patch(
            "polarlight.infrastructure.datasets.requests.get",
            side_effect=lambda url, **kwargs: fake_response(payloads[url]),
        ):
            loader = MNISTDatasetLoader(root=str(tmp_path), base_url="http://mirror/")
            dataset = loader.load("test", None)

        assert dataset[0][1] == 4
        assert (tmp_path / "t10k-images-idx3-ubyte").exists()
