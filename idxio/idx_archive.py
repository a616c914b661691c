"""
idx_archive.py - Reader for the IDX binary tensor format

Format specification (big-endian throughout):
- Bytes 0-1: reserved, normally zero (ignored unless configured otherwise)
- Byte 2: element type code
    0x08 unsigned byte, 0x09 signed byte, 0x0B short (2 bytes),
    0x0C int (4 bytes), 0x0D float (4 bytes), 0x0E double (8 bytes)
- Byte 3: number of dimensions N (0-255)
- N x int32: size of each dimension
- Element data: prod(sizes) elements in row-major order (last dimension
  varies fastest), no padding

File names:
- MNIST-style datasets use names like train-images-idx3-ubyte, where idx3
  is the dimension count and ubyte the element type. Any name is accepted;
  only the header is consulted.

Usage:
    import idxio.idx_archive as ia

    # Typed tensor: numpy object array of IdxData
    images = ia.load("train-images-idx3-ubyte")
    images.shape                # (60000, 28, 28)
    images[0, 14, 14]           # IdxData(IdxType.UNSIGNED_BYTE, 253)

    # Native numpy array of the element dtype
    pixels = ia.load_array("train-images-idx3-ubyte")

    # Header only
    header = ia.read_header("train-labels-idx1-ubyte")
    header.type, header.shape   # (IdxType.UNSIGNED_BYTE, (60000,))

    # Decode from bytes
    tensor = ia.loads(payload)
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from functools import reduce
from operator import mul
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Sequence, Union

import numpy as np

from .configuration import DecodeConfiguration
from .errors import (
    IdxError,
    IdxIOError,
    InvalidHeaderError,
    TruncatedStreamError,
    UnrecognizedTypeCodeError,
)
from .idx_data import ABSENT, IdxData, IdxType

__all__ = [
    "IdxError",
    "IdxHeader",
    "IdxIOError",
    "IdxReader",
    "InvalidHeaderError",
    "TruncatedStreamError",
    "UnrecognizedTypeCodeError",
    "iter_coordinates",
    "load",
    "load_array",
    "loads",
    "read_header",
    "to_ndarray",
]


# =============================================================================
# Header layout
# =============================================================================

RESERVED_SIZE = 2
PREFIX_SIZE = 4  # reserved + type code + dimension count
DIMENSION_SIZE = 4

MAX_DIMENSIONS = 64  # numpy ndarray limit (numpy >= 2)
READ_CHUNK_SIZE = 1 << 20


@dataclass(frozen=True)
class IdxHeader:
    """Element type and dimension sizes declared by an IDX header."""

    type: IdxType
    shape: tuple[int, ...]

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        """Number of elements; 1 for a zero-dimensional tensor."""
        return reduce(mul, self.shape, 1)

    @property
    def data_offset(self) -> int:
        """Byte offset of the first element from the start of the stream."""
        return PREFIX_SIZE + DIMENSION_SIZE * self.ndim

    @property
    def nbytes(self) -> int:
        return self.size * self.type.width


def iter_coordinates(shape: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Yield every element coordinate of `shape` in row-major order.

    The walk keeps an explicit stack of (depth, index) frames rather than
    recursing once per dimension, so a header declaring 255 dimensions does
    not depend on the interpreter's recursion limit. `coords` always holds
    exactly `depth` entries when a frame at that depth is resumed.

    A zero-dimensional shape yields a single empty coordinate. A zero size
    at any depth yields nothing for that subtree.
    """
    if not shape:
        yield ()
        return

    last = len(shape) - 1
    coords: list[int] = []
    frames = [(0, 0)]
    while frames:
        depth, index = frames.pop()
        del coords[depth:]
        if index >= shape[depth]:
            continue
        frames.append((depth, index + 1))
        coords.append(index)
        if depth == last:
            yield tuple(coords)
        else:
            frames.append((depth + 1, 0))


# =============================================================================
# Reader
# =============================================================================


class IdxReader:
    """Reader for a single IDX stream.

    The header is parsed once, on first use; the element data can then be
    decoded either as a typed tensor (read_tensor) or as a native numpy
    array (read_array), but only once per reader; a second decode raises
    RuntimeError.
    """

    def __init__(
        self,
        source: Union[str, Path, BinaryIO],
        config: Optional[DecodeConfiguration] = None,
    ):
        if isinstance(source, (str, Path)):
            self._file = open(source, "rb")
            self._owns_file = True
        else:
            self._file = source
            self._owns_file = False
        self.config = config if config is not None else DecodeConfiguration()
        self._offset = 0
        self._header: Optional[IdxHeader] = None
        self._data_read = False

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_file:
            self._file.close()

    @property
    def offset(self) -> int:
        """Number of bytes consumed from the stream so far."""
        return self._offset

    def _read_exact(self, n: int, what: str) -> bytes:
        chunks = []
        remaining = n
        while remaining > 0:
            try:
                chunk = self._file.read(min(remaining, READ_CHUNK_SIZE))
            except OSError as exc:
                raise IdxIOError(f"Failed to read {what}: {exc}", self._offset) from exc
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        if len(data) < n:
            raise TruncatedStreamError(n, len(data), what, self._offset)
        self._offset += n
        return data

    def _read_uint8(self, what: str) -> int:
        return self._read_exact(1, what)[0]

    def _read_int32(self, what: str) -> int:
        return int.from_bytes(self._read_exact(4, what), "big", signed=True)

    def read_header(self) -> IdxHeader:
        """Parse the header, leaving the stream at the first element."""
        if self._header is not None:
            return self._header

        start = self._offset
        reserved = self._read_exact(RESERVED_SIZE, "reserved bytes")
        if self.config.strict_reserved and reserved != b"\x00" * RESERVED_SIZE:
            raise InvalidHeaderError(
                f"Reserved header bytes must be zero, got 0x{reserved.hex().upper()}",
                start,
            )

        type_offset = self._offset
        kind = IdxType.from_code(self._read_uint8("type code"), type_offset)
        ndim = self._read_uint8("dimension count")

        shape = []
        for axis in range(ndim):
            dim_offset = self._offset
            size = self._read_int32(f"size of dimension {axis}")
            if size < 0:
                if not self.config.allow_negative_dimensions:
                    raise InvalidHeaderError(
                        f"Negative size {size} for dimension {axis}", dim_offset
                    )
                size &= 0xFFFFFFFF
            shape.append(size)

        self._header = IdxHeader(kind, tuple(shape))
        return self._header

    def _begin_data(self) -> IdxHeader:
        """Check the header against the container and the stream length.

        Runs before anything is allocated, so an oversized or truncated file
        fails with an IdxError rather than a numpy or memory error.
        """
        if self._data_read:
            raise RuntimeError("Element data has already been read from this reader")
        header = self.read_header()
        if header.ndim > MAX_DIMENSIONS:
            raise InvalidHeaderError(
                f"{header.ndim} dimensions exceed numpy's maximum of {MAX_DIMENSIONS}",
                PREFIX_SIZE - 1,
            )
        self._data_read = True

        if header.size == 0 or not self._file.seekable():
            return header
        try:
            pos = self._file.tell()
            end = self._file.seek(0, io.SEEK_END)
            self._file.seek(pos)
        except OSError as exc:
            raise IdxIOError(f"Failed to measure stream: {exc}", self._offset) from exc
        available = max(end - pos, 0)
        if available < header.nbytes:
            raise TruncatedStreamError(
                header.nbytes, available, "element data", self._offset
            )
        return header

    def _allocate(self, header: IdxHeader, fill, dtype) -> np.ndarray:
        try:
            return np.full(header.shape, fill, dtype=dtype)
        except (ValueError, MemoryError) as exc:
            raise InvalidHeaderError(
                f"Cannot allocate tensor of shape {header.shape}: {exc}",
                header.data_offset,
            ) from exc

    def read_tensor(self) -> np.ndarray:
        """Decode all elements into an object array of IdxData.

        Elements are read one at a time in row-major order. A short read
        aborts the decode with TruncatedStreamError.
        """
        header = self._begin_data()
        kind = header.type
        codec = kind.codec
        width = kind.width

        tensor = self._allocate(header, ABSENT, object)
        for coords in iter_coordinates(header.shape):
            data = self._read_exact(width, "element")
            tensor[coords] = IdxData(kind, codec.unpack(data)[0])
        return tensor

    def read_array(self) -> np.ndarray:
        """Decode all elements into a native-endian numpy array."""
        header = self._begin_data()
        if header.size == 0:
            return self._allocate(header, 0, header.type.native_dtype)
        data = self._read_exact(header.nbytes, "element data")
        values = np.frombuffer(data, dtype=header.type.dtype)
        return values.astype(header.type.native_dtype).reshape(header.shape)


# =============================================================================
# Convenience functions
# =============================================================================


def load(
    source: Union[str, Path, BinaryIO], config: Optional[DecodeConfiguration] = None
) -> np.ndarray:
    """Load an IDX file into an N-dimensional array of IdxData.

    Args:
        source: File path (str or Path) or binary file-like object
        config: Optional DecodeConfiguration

    Returns:
        numpy object array shaped per the header, every element an IdxData
        of the header's type

    Raises:
        TruncatedStreamError: if the stream ends early
        UnrecognizedTypeCodeError: if the type byte is unknown
        InvalidHeaderError: for negative dimension sizes (by default)
        IdxIOError: if reading the underlying stream fails

    Example:
        labels = load("train-labels-idx1-ubyte")

        with open("t10k-images-idx3-ubyte", "rb") as f:
            images = load(f)
    """
    with IdxReader(source, config) as reader:
        return reader.read_tensor()


def loads(data: bytes, config: Optional[DecodeConfiguration] = None) -> np.ndarray:
    """Decode an IDX tensor from an in-memory buffer.

    Example:
        tensor = loads(b"\\x00\\x00\\x08\\x01\\x00\\x00\\x00\\x02\\x07\\x09")
    """
    return load(io.BytesIO(data), config)


def load_array(
    source: Union[str, Path, BinaryIO], config: Optional[DecodeConfiguration] = None
) -> np.ndarray:
    """Load an IDX file straight into a native numpy array.

    Faster than load() for large datasets, since elements are decoded in a
    single pass by numpy instead of one IdxData at a time.

    Example:
        pixels = load_array("train-images-idx3-ubyte")   # uint8, (60000, 28, 28)
    """
    with IdxReader(source, config) as reader:
        return reader.read_array()


def read_header(
    source: Union[str, Path, BinaryIO], config: Optional[DecodeConfiguration] = None
) -> IdxHeader:
    """Read only the header of an IDX file."""
    with IdxReader(source, config) as reader:
        return reader.read_header()


def to_ndarray(tensor: np.ndarray, dtype=None) -> np.ndarray:
    """Convert an object array of IdxData into a native numeric array.

    Args:
        tensor: Array returned by load()
        dtype: Target dtype; defaults to the native dtype of the elements'
            type, which requires a non-empty tensor of a single type

    Raises:
        ValueError: if any element is absent, or the dtype cannot be inferred
    """
    elements = list(tensor.flat)
    if any(element.is_absent for element in elements):
        raise ValueError("Tensor contains absent elements")

    if dtype is None:
        kinds = {element.kind for element in elements}
        if len(kinds) != 1:
            raise ValueError(
                "Cannot infer dtype from "
                + ("an empty tensor" if not kinds else "mixed element types")
            )
        dtype = kinds.pop().native_dtype

    values = np.array([element.value for element in elements], dtype=dtype)
    return values.reshape(tensor.shape)
