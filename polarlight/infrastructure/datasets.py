"""Dataset loading - MNIST download, disk cache and IDX decoding.

Raw IDX files are fetched once, gunzipped and cached under a root
directory, then decoded with numpy and handed to the core as Tensors.
"""
import gzip
import logging
import os

import numpy
import requests
from tqdm import tqdm

from polarlight.domain.entities.dataset import Dataset
from polarlight.domain.entities.tensor import Tensor

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ossci-datasets.s3.amazonaws.com/mnist/"

MNIST_RESOURCES = {
    "train": ("train-images-idx3-ubyte", "train-labels-idx1-ubyte"),
    "test": ("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte"),
}

# IDX type code -> big-endian numpy dtype
IDX_DTYPES = {
    0x08: numpy.dtype(">u1"),
    0x09: numpy.dtype(">i1"),
    0x0B: numpy.dtype(">i2"),
    0x0C: numpy.dtype(">i4"),
    0x0D: numpy.dtype(">f4"),
    0x0E: numpy.dtype(">f8"),
}

_CHUNK_SIZE = 1 << 16


def download_from_url(root: str, file_name: str, url: str, decompress: bool = True) -> str:
    """
    Download `url` to ``root/file_name`` unless that file already exists.

    Parameters
    ----------
    root : str
        Cache directory; created when missing.
    file_name : str
        Name of the cached file.
    url : str
        Source URL.
    decompress : bool
        Gunzip the payload before writing it.

    Returns
    -------
    str
        Path of the cached file.

    Raises
    ------
    requests.RequestException
        If the download fails.
    """
    os.makedirs(root, exist_ok=True)
    file_path = os.path.join(root, file_name)
    if os.path.exists(file_path):
        logger.info(f"Using cached {file_path}")
        return file_path

    logger.info(f"Downloading {url} to {file_path}")
    try:
        response = requests.get(url, stream=True, timeout=30)
        response.raise_for_status()
        total = int(response.headers.get("content-length", 0)) or None
        chunks = []
        with tqdm(total=total, desc=file_name, unit="B", unit_scale=True, leave=False) as pbar:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                chunks.append(chunk)
                pbar.update(len(chunk))
    except requests.RequestException as error:
        logger.error(f"Failed to download {url}: {error}")
        raise

    payload = b"".join(chunks)
    if decompress:
        payload = gzip.decompress(payload)

    with open(file_path, "wb") as f:
        f.write(payload)
    return file_path


def read_idx(raw: bytes) -> numpy.ndarray:
    """
    Decode an IDX file.

    The header is two zero bytes, a type code, the rank, then one big-endian
    uint32 size per axis; the row-major payload follows.

    Parameters
    ----------
    raw : bytes
        Complete file contents.

    Returns
    -------
    numpy.ndarray
        Array of the declared shape and dtype.

    Raises
    ------
    ValueError
        If the header is malformed or the payload length disagrees with it.
    """
    if len(raw) < 4 or raw[0] != 0 or raw[1] != 0:
        raise ValueError("Not an IDX file: bad magic number")

    type_code, rank = raw[2], raw[3]
    if type_code not in IDX_DTYPES:
        raise ValueError(f"Unsupported IDX type code 0x{type_code:02X}")

    header_size = 4 + 4 * rank
    if len(raw) < header_size:
        raise ValueError(f"Truncated IDX header: expected {header_size} bytes, got {len(raw)}")
    shape = tuple(int(size) for size in numpy.frombuffer(raw, dtype=">u4", count=rank, offset=4))

    dtype = IDX_DTYPES[type_code]
    count = 1
    for size in shape:
        count *= size
    expected = header_size + count * dtype.itemsize
    if len(raw) != expected:
        raise ValueError(
            f"IDX payload for shape {list(shape)} should be {expected} bytes, got {len(raw)}"
        )
    return numpy.frombuffer(raw, dtype=dtype, count=count, offset=header_size).reshape(shape)


def idx_to_tensor(raw: bytes) -> Tensor:
    """Decode an IDX file straight into a Tensor of the declared shape."""
    array = read_idx(raw)
    return Tensor.build(list(array.shape), array.ravel().tolist())


class MNISTDatasetAdapter(Dataset):
    """Map-style MNIST dataset of ``(Tensor[rows, cols], label)`` pairs, pixels in [0, 1]."""

    def __init__(self, images: numpy.ndarray, labels: numpy.ndarray):
        if images.ndim != 3:
            raise ValueError(f"MNIST images must have rank 3, got shape {list(images.shape)}")
        if len(images) != len(labels):
            raise ValueError(
                f"Found {len(images)} images but {len(labels)} labels"
            )
        self._images = images
        self._labels = labels

    def __len__(self) -> int:
        return len(self._images)

    def __getitem__(self, idx: int) -> tuple[Tensor, int]:
        image = self._images[idx].astype(numpy.float64) / 255.0
        return Tensor.build(list(image.shape), image.ravel().tolist()), int(self._labels[idx])

    @property
    def image_size(self) -> tuple[int, int]:
        return self._images.shape[1], self._images.shape[2]


def load_dataset(
    root: str,
    split: str = "train",
    max_samples: int | None = None,
    download: bool = True,
    base_url: str = DEFAULT_BASE_URL,
) -> Dataset:
    """
    Loads an MNIST split from the disk cache, downloading it if needed.

    Args:
        root: Cache directory for the raw IDX files.
        split: "train" or "test".
        max_samples: Optional limit on the number of samples to keep.
        download: Fetch missing files; when False a missing file is an error.
        base_url: Mirror serving the gzipped IDX files.

    Returns:
        A Dataset of (image tensor, label) pairs.
    """
    if split not in MNIST_RESOURCES:
        raise ValueError(f"Split {split} not found in MNIST. Available: {list(MNIST_RESOURCES)}")

    arrays = []
    for file_name in MNIST_RESOURCES[split]:
        file_path = os.path.join(root, file_name)
        if download:
            file_path = download_from_url(root, file_name, f"{base_url}{file_name}.gz")
        elif not os.path.exists(file_path):
            raise FileNotFoundError(f"MNIST file not found at {file_path} and download is disabled")

        with open(file_path, "rb") as f:
            arrays.append(read_idx(f.read()))

    images, labels = arrays
    if max_samples is not None:
        images, labels = images[:max_samples], labels[:max_samples]

    logger.info(f"Loaded MNIST {split} split with {len(images)} samples")
    return MNISTDatasetAdapter(images, labels)
