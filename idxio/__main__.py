"""Inspect IDX files from the command line.

Usage:
    python -m idxio train-images-idx3-ubyte
    python -m idxio train-labels-idx1-ubyte --stats
    python -m idxio t10k-labels-idx1-ubyte --head 10
    python -m idxio data.idx --config decode.toml -v
"""

import argparse
import itertools
import logging
import sys
from pathlib import Path

from .configuration import DecodeConfiguration
from .errors import IdxError
from .idx_archive import IdxReader

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """
    Configure the root logger.

    Uses the format "timestamp - logger name - level - message" and writes
    records to stdout; DEBUG level when `verbose`, INFO otherwise.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def describe(filename, config=None, stats=False, head=0):
    """Print a summary of one IDX file."""
    with IdxReader(filename, config) as reader:
        header = reader.read_header()
        logger.debug("Parsed header of %s (%d bytes)", filename, reader.offset)

        print(f"{filename}:")
        print(f"  type: {header.type.name.lower()} (0x{header.type.value:02X})")
        print(f"  shape: {header.shape}")
        print(f"  elements: {header.size}")
        print(f"  data offset: {header.data_offset}")

        if head > 0:
            tensor = reader.read_tensor()
            for value in itertools.islice(tensor.flat, head):
                print(f"  {value!r}")
        elif stats:
            values = reader.read_array()
            if values.size == 0:
                print("  (no elements)")
            else:
                print(f"  min: {values.min()}")
                print(f"  max: {values.max()}")
                print(f"  mean: {values.mean():.6g}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Inspect IDX tensor files",
        prog="python -m idxio",
    )
    parser.add_argument(
        "filenames",
        nargs="+",
        help="IDX file(s) to inspect",
    )
    parser.add_argument(
        "--config",
        help="TOML file with a [decode] table",
    )
    decode_group = parser.add_mutually_exclusive_group()
    decode_group.add_argument(
        "--stats",
        action="store_true",
        help="Decode the data and print min/max/mean",
    )
    decode_group.add_argument(
        "--head",
        type=int,
        default=0,
        metavar="N",
        help="Decode the data and print the first N elements",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    config = DecodeConfiguration.load(args.config) if args.config else None

    status = 0
    for filename in args.filenames:
        if not Path(filename).exists():
            logger.error("File not found: %s", filename)
            status = 1
            continue
        try:
            describe(filename, config, stats=args.stats, head=args.head)
        except IdxError as e:
            logger.error("Failed to decode %s: %s", filename, e)
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
