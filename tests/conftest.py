"""Pytest configuration and shared fixtures."""
import struct

import pytest


def build_idx(type_code: int, shape, payload: bytes = b"", reserved: bytes = b"\x00\x00") -> bytes:
    """
    Assemble an IDX byte stream.

    Parameters:
        type_code (int): Header type byte, e.g. 0x08 for unsigned byte.
        shape (sequence[int]): Dimension sizes, written as big-endian int32.
        payload (bytes): Raw element data appended after the header.
        reserved (bytes): The two leading reserved bytes.

    Returns:
        bytes: The complete stream.
    """
    header = reserved + bytes([type_code, len(shape)])
    header += b"".join(struct.pack(">i", size) for size in shape)
    return header + payload


@pytest.fixture
def make_idx():
    """Provide the IDX byte-stream builder."""
    return build_idx


@pytest.fixture
def mnist_like_files(tmp_path):
    """
    Write a tiny MNIST-style image/label pair to disk.

    Returns:
        tuple[Path, Path]: Paths of a (4, 3, 3) unsigned-byte image file and
        a matching (4,) unsigned-byte label file.
    """
    pixels = bytes(range(36))
    images = tmp_path / "images-idx3-ubyte"
    images.write_bytes(build_idx(0x08, [4, 3, 3], pixels))
    labels = tmp_path / "labels-idx1-ubyte"
    labels.write_bytes(build_idx(0x08, [4], bytes([7, 2, 1, 0])))
    return images, labels
