"""
mnist_loader.py
~~~~~~~~~~~~~~~

Readers turning MNIST-style datasets into network samples.

Two on-disk formats are supported:
- CSV, one record per line: label,pixel_1,...,pixel_N
- NPZ archives with an ``images`` array (N x pixels) and a ``labels`` array

Pixels are raw 0-255 intensities; they are scaled into [0.01, 1.0] and the
label is encoded as a soft one-hot target vector.
"""

import csv
import logging
import os
import zipfile
from typing import Iterator, List, NamedTuple, Sequence

import numpy as np

logger = logging.getLogger(__name__)

TARGET_ON = 0.99
TARGET_OFF = 0.01


class DatasetError(ValueError):
    """Raised for malformed dataset records."""


class Sample(NamedTuple):
    """One training/evaluation example."""
    inputs: np.ndarray
    targets: np.ndarray
    label: int


def scale_pixels(raw: Sequence[float]) -> np.ndarray:
    """
    Map raw 0-255 pixel intensities into [0.01, 1.0].

    Zero never reaches the network as an exact 0, which would switch off
    the matching weights during training.
    """
    return np.asarray(raw, dtype=np.float64) / 255.0 * 0.99 + 0.01


def encode_label(label: int, output_size: int) -> np.ndarray:
    """
    Encode a class label as a target vector.

    Args:
        label: Class index in [0, output_size)
        output_size: Length of the target vector

    Returns:
        Vector with 0.99 at the label index and 0.01 elsewhere

    Raises:
        ValueError: If the label is out of range
    """
    if not 0 <= label < output_size:
        raise ValueError(
            f"Label {label} is outside the range 0..{output_size - 1}"
        )
    targets = np.full(output_size, TARGET_OFF, dtype=np.float64)
    targets[label] = TARGET_ON
    return targets


def parse_record(
    record: List[str],
    input_size: int,
    output_size: int
) -> Sample:
    """
    Convert one CSV record into a Sample.

    Raises:
        DatasetError: If the record is too short or holds non-numbers
    """
    if len(record) < input_size + 1:
        raise DatasetError(
            f"Expected {input_size + 1} fields, got {len(record)}"
        )
    try:
        label = int(record[0])
        pixels = [float(field) for field in record[1:input_size + 1]]
    except ValueError as e:
        raise DatasetError(f"Non-numeric field: {e}") from e

    try:
        targets = encode_label(label, output_size)
    except ValueError as e:
        raise DatasetError(str(e)) from e

    return Sample(scale_pixels(pixels), targets, label)


def read_csv_samples(
    path: str,
    input_size: int,
    output_size: int
) -> Iterator[Sample]:
    """
    Stream samples from a CSV file.

    Args:
        path: CSV file, one record per line, label first
        input_size: Number of pixel fields used per record
        output_size: Number of classes

    Yields:
        Sample for every record, in file order

    Raises:
        OSError: If the file cannot be opened
        DatasetError: On the first malformed record, naming its line
    """
    with open(path, newline='') as f:
        reader = csv.reader(f)
        for record in reader:
            if not record:
                continue
            try:
                yield parse_record(record, input_size, output_size)
            except DatasetError as e:
                raise DatasetError(f"{path}:{reader.line_num}: {e}") from e


def _load_npz_arrays(path: str):
    """Return the (images, labels) arrays stored in an NPZ archive."""
    try:
        data = np.load(path, allow_pickle=False)
    except (ValueError, EOFError, zipfile.BadZipFile) as e:
        raise DatasetError(f"{path}: not a valid NPZ archive: {e}") from e

    if not isinstance(data, np.lib.npyio.NpzFile):
        raise DatasetError(f"{path}: expected an NPZ archive, found a single array")

    with data:
        try:
            return data['images'], data['labels']
        except KeyError as e:
            raise DatasetError(f"{path}: missing array {e}") from e
        except (ValueError, EOFError, zipfile.BadZipFile) as e:
            raise DatasetError(f"{path}: corrupt array data: {e}") from e


def read_npz_samples(
    path: str,
    input_size: int,
    output_size: int
) -> Iterator[Sample]:
    """
    Stream samples from an NPZ archive with ``images`` and ``labels``.

    Raises:
        OSError: If the file cannot be opened
        DatasetError: If the file is not a valid archive or the arrays are
            missing or inconsistent
    """
    images, labels = _load_npz_arrays(path)

    if images.ndim != 2 or images.shape[1] < input_size:
        raise DatasetError(
            f"{path}: images must have shape (N, {input_size}), "
            f"got {images.shape}"
        )
    if len(images) != len(labels):
        raise DatasetError(
            f"{path}: {len(images)} images but {len(labels)} labels"
        )

    for index, (pixels, label) in enumerate(zip(images, labels)):
        try:
            targets = encode_label(int(label), output_size)
        except ValueError as e:
            raise DatasetError(f"{path}[{index}]: {e}") from e
        yield Sample(scale_pixels(pixels[:input_size]), targets, int(label))


def iter_samples(
    path: str,
    input_size: int,
    output_size: int
) -> Iterator[Sample]:
    """Stream samples from a CSV or NPZ file, chosen by file extension."""
    ext = os.path.splitext(path)[1].lower()
    if ext == '.npz':
        return read_npz_samples(path, input_size, output_size)
    return read_csv_samples(path, input_size, output_size)
