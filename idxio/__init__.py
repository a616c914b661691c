"""Decoder for the IDX binary tensor format used by MNIST-style datasets."""

from . import idx_archive
from .configuration import DecodeConfiguration
from .errors import (
    IdxError,
    IdxIOError,
    InvalidHeaderError,
    TruncatedStreamError,
    UnrecognizedTypeCodeError,
)
from .idx_archive import (
    IdxHeader,
    IdxReader,
    iter_coordinates,
    load,
    load_array,
    loads,
    read_header,
    to_ndarray,
)
from .idx_data import IdxData, IdxType

__version__ = "0.1.0"
