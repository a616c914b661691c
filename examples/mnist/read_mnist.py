"""Example usage of the idxio Python interface.

Expects the MNIST test set (t10k-images-idx3-ubyte, t10k-labels-idx1-ubyte)
in the current directory.
"""

import numpy as np

import idxio
from idxio import IdxData, IdxType

# Header only
header = idxio.read_header("t10k-images-idx3-ubyte")
print(f"type = {header.type.name}, shape = {header.shape}, elements = {header.size}")

# Typed tensor of IdxData
labels = idxio.load("t10k-labels-idx1-ubyte")
print(f"labels.shape = {labels.shape}, first = {labels[0]!r}")

# Scalars of the same type add; mismatched types give the absent value
total = labels[0] + labels[1]
print(f"labels[0] + labels[1] = {total!r}")
print(f"mismatched = {labels[0] + IdxData(IdxType.SIGNED_BYTE, 1)!r}")
print(f"as float64 = {labels[0].convert(np.float64)}")

print()

# Native numpy arrays are much faster for whole datasets
images = idxio.load_array("t10k-images-idx3-ubyte")
print(f"images.dtype = {images.dtype}, images.shape = {images.shape}")
print(f"mean pixel = {images.mean():.4f}")

# Strict header checks
config = idxio.DecodeConfiguration(strict_reserved=True)
try:
    idxio.loads(b"\x01\x00\x08\x00\x2a", config)
except idxio.InvalidHeaderError as e:
    print(f"Expected error: {e}")
