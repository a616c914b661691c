"""
idx_data.py - Element types and typed scalar values for IDX tensors

Every element of a decoded IDX tensor is an IdxData: a small immutable value
that carries both the number and the width it was stored with in the file.

Type codes (header byte 2):
- 0x08: unsigned byte (1 byte)
- 0x09: signed byte (1 byte)
- 0x0B: short (2 bytes)
- 0x0C: int (4 bytes)
- 0x0D: float (4 bytes)
- 0x0E: double (8 bytes)

Usage:
    from idxio.idx_data import IdxData, IdxType

    a = IdxData(IdxType.UNSIGNED_BYTE, 3)
    b = IdxData(IdxType.UNSIGNED_BYTE, 4)
    (a + b).value                               # 7
    a + IdxData(IdxType.SIGNED_BYTE, 3)         # IdxData() - mismatched variants
    a.convert(float)                            # 3.0
"""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

from .errors import UnrecognizedTypeCodeError


class IdxType(enum.Enum):
    """Element type tag read from the IDX header."""

    UNSIGNED_BYTE = 0x08
    SIGNED_BYTE = 0x09
    SHORT = 0x0B
    INT = 0x0C
    FLOAT = 0x0D
    DOUBLE = 0x0E

    @classmethod
    def from_code(cls, code: int, offset: Optional[int] = None) -> IdxType:
        """Map a header type byte to its IdxType.

        Raises:
            UnrecognizedTypeCodeError: if `code` is not one of the six codes
        """
        try:
            return cls(code)
        except ValueError:
            raise UnrecognizedTypeCodeError(code, offset) from None

    @property
    def width(self) -> int:
        """Size of one element in bytes."""
        return _FORMATS[self].size

    @property
    def codec(self) -> struct.Struct:
        """Big-endian struct for one element."""
        return _FORMATS[self]

    @property
    def dtype(self) -> np.dtype:
        """Big-endian numpy dtype matching the on-disk layout."""
        return _DTYPES[self]

    @property
    def native_dtype(self) -> np.dtype:
        return _DTYPES[self].newbyteorder("=")


_FORMATS = {
    IdxType.UNSIGNED_BYTE: struct.Struct(">B"),
    IdxType.SIGNED_BYTE: struct.Struct(">b"),
    IdxType.SHORT: struct.Struct(">h"),
    IdxType.INT: struct.Struct(">i"),
    IdxType.FLOAT: struct.Struct(">f"),
    IdxType.DOUBLE: struct.Struct(">d"),
}

_DTYPES = {
    IdxType.UNSIGNED_BYTE: np.dtype(">u1"),
    IdxType.SIGNED_BYTE: np.dtype(">i1"),
    IdxType.SHORT: np.dtype(">i2"),
    IdxType.INT: np.dtype(">i4"),
    IdxType.FLOAT: np.dtype(">f4"),
    IdxType.DOUBLE: np.dtype(">f8"),
}


Number = Union[int, float]


def _normalize(kind: IdxType, value: Number) -> Number:
    """Bring a payload into the range representable by `kind`."""
    if kind is IdxType.DOUBLE:
        return float(value)
    if kind is IdxType.FLOAT:
        return float(np.float32(value))
    bits = kind.width * 8
    value = int(value) & ((1 << bits) - 1)
    if kind is not IdxType.UNSIGNED_BYTE and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


@dataclass(frozen=True)
class IdxData:
    """A single typed IDX element.

    `kind` is None for the absent value, which is what freshly allocated
    tensors hold before decoding overwrites them.
    """

    kind: Optional[IdxType] = None
    value: Optional[Number] = None

    def __post_init__(self):
        if self.kind is None:
            if self.value is not None:
                raise ValueError("Absent IdxData cannot carry a value")
            return
        if self.value is None:
            raise ValueError(f"IdxData of kind {self.kind.name} requires a value")
        object.__setattr__(self, "value", _normalize(self.kind, self.value))

    @classmethod
    def zero(cls) -> IdxData:
        """Additive identity used by generic reductions: the absent value."""
        return ABSENT

    def is_zero(self) -> bool:
        return self.kind is None

    @property
    def is_absent(self) -> bool:
        return self.kind is None

    def __add__(self, other: Any) -> IdxData:
        """Add two scalars of the same variant.

        Mismatched variants, or either side absent, give the absent value
        rather than an error.
        """
        if not isinstance(other, IdxData):
            return NotImplemented
        if self.kind is None or self.kind is not other.kind:
            return ABSENT
        return IdxData(self.kind, self.value + other.value)

    def convert(self, target: type) -> Optional[Any]:
        """Convert the payload into `target` (int, float or a numpy scalar type).

        Returns None for the absent value, and when `target` cannot represent
        the payload (NaN or infinity to an integer type, or a value outside a
        numpy integer type's range). Floats narrowed to integers truncate
        toward zero.

        Example:
            IdxData(IdxType.UNSIGNED_BYTE, 255).convert(np.float64)   # 255.0
            IdxData(IdxType.SHORT, 300).convert(np.uint8)             # None
        """
        if self.kind is None:
            return None

        value = self.value
        is_int_target = target is int or (
            isinstance(target, type) and issubclass(target, np.integer)
        )
        if is_int_target:
            if isinstance(value, float):
                if not math.isfinite(value):
                    return None
                value = math.trunc(value)
            if target is not int:
                info = np.iinfo(target)
                if not info.min <= value <= info.max:
                    return None
        return target(value)

    def __repr__(self) -> str:
        if self.kind is None:
            return "IdxData()"
        return f"IdxData(IdxType.{self.kind.name}, {self.value!r})"


ABSENT = IdxData()
