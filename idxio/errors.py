"""Errors reported while decoding IDX files."""

from typing import Optional


class IdxError(Exception):
    """Base class for all IDX decoding errors."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        full_msg = message
        if offset is not None:
            full_msg = f"Offset {offset}: {message}"
        super().__init__(full_msg)


class TruncatedStreamError(IdxError):
    """The stream ended before a header field or element could be read."""

    def __init__(self, expected: int, received: int, what: str, offset: Optional[int] = None):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Unexpected end of IDX data while reading {what}: "
            f"needed {expected} bytes, got {received}",
            offset,
        )


class UnrecognizedTypeCodeError(IdxError):
    """The header's type byte is not one of the six IDX element types."""

    code: int

    def __init__(self, code: int, offset: Optional[int] = None):
        self.code = code
        super().__init__(f"Unrecognized IDX type code 0x{code:02X}", offset)


class IdxIOError(IdxError):
    """The underlying stream failed while reading (not a clean end of data)."""


class InvalidHeaderError(IdxError):
    """The header is well-formed bytes but describes an unusable tensor."""
