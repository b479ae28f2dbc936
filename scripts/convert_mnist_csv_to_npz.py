#!/usr/bin/env python3
"""
Convert MNIST CSV files to compressed NPZ archives.

The CSV datasets (one ``label,pixel_1,...,pixel_784`` record per line) are
slow to parse on every epoch. This script stores the same records as an
``images``/``labels`` pair in a .npz archive that mlpnet reads directly.

Usage:
    python scripts/convert_mnist_csv_to_npz.py [CSV ...]

Without arguments the script converts mnist_dataset/mnist_train.csv and
mnist_dataset/mnist_test.csv. Each output is written next to its input.
"""

import csv
import os
import sys
from typing import List, Tuple

import numpy as np


def load_csv(filepath: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load an MNIST CSV file.

    Parameters:
    -----------
    filepath : str
        Path to the CSV file

    Returns:
    --------
    tuple
        (images, labels) with images as uint8 (N, pixels) and labels as
        int64 (N,)

    Raises:
    -------
    ValueError
        If the file holds no records or a pixel lies outside 0..255
    """
    print(f"📂 Loading CSV data from: {filepath}")

    images: List[List[int]] = []
    labels: List[int] = []
    with open(filepath, newline='') as f:
        reader = csv.reader(f)
        for record in reader:
            if not record:
                continue
            pixels = [int(float(v)) for v in record[1:]]
            if any(not 0 <= p <= 255 for p in pixels):
                raise ValueError(
                    f"{filepath}:{reader.line_num}: pixel values must lie in 0..255"
                )
            labels.append(int(record[0]))
            images.append(pixels)

    if not images:
        raise ValueError(f"{filepath}: no records found")

    image_array = np.asarray(images, dtype=np.uint8)
    label_array = np.asarray(labels, dtype=np.int64)
    print(f"✅ Loaded {len(label_array)} records of {image_array.shape[1]} pixels")
    return image_array, label_array


def save_as_npz(images: np.ndarray, labels: np.ndarray, filepath: str) -> None:
    """
    Save images and labels as a compressed NPZ archive.

    Parameters:
    -----------
    images : np.ndarray
        Raw pixel intensities
    labels : np.ndarray
        Class labels
    filepath : str
        Output path for the .npz file
    """
    print(f"\n💾 Converting to NPZ format: {filepath}")

    np.savez_compressed(filepath, images=images, labels=labels)

    npz_size = os.path.getsize(filepath) / (1024 * 1024)  # MB
    print(f"✅ Saved successfully (size: {npz_size:.2f} MB)")


def verify_conversion(
    npz_filepath: str,
    images: np.ndarray,
    labels: np.ndarray
) -> bool:
    """
    Verify that the NPZ file contains the same data as the CSV.

    Returns:
    --------
    bool
        True if verification passes
    """
    print(f"\n🔍 Verifying conversion...")

    with np.load(npz_filepath) as data:
        assert np.array_equal(data['images'], images), "Images don't match!"
        assert np.array_equal(data['labels'], labels), "Labels don't match!"

    print("✅ Verification passed! Data is identical.")
    return True


def convert(csv_path: str) -> str:
    """Convert one CSV file and return the path of the archive."""
    npz_path = os.path.splitext(csv_path)[0] + '.npz'
    images, labels = load_csv(csv_path)
    save_as_npz(images, labels, npz_path)
    verify_conversion(npz_path, images, labels)
    return npz_path


def main(argv: List[str]) -> int:
    """Main conversion function."""
    print("=" * 60)
    print("MNIST Data Format Converter")
    print("CSV → NPZ format")
    print("=" * 60)

    paths = argv or [
        os.path.join('mnist_dataset', 'mnist_train.csv'),
        os.path.join('mnist_dataset', 'mnist_test.csv'),
    ]

    missing = [p for p in paths if not os.path.exists(p)]
    if missing:
        for path in missing:
            print(f"❌ Error: CSV file not found: {path}")
        return 1

    try:
        written = [convert(path) for path in paths]
    except (OSError, ValueError, AssertionError) as e:
        print(f"\n❌ Error during conversion: {e}")
        return 1

    print("\n" + "=" * 60)
    print("✅ CONVERSION COMPLETE!")
    print("=" * 60)
    print(f"\n📁 Files:")
    for path in written:
        print(f"   - {path}")
    print(f"\n📝 Next steps:")
    print(f"   mlpnet --mnist train --train-file {written[0]}")
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
