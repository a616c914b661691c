"""
plot_images.py - Plot images from IDX image files

Usage:
    python -m idxio.plot_images train-images-idx3-ubyte
    python -m idxio.plot_images train-images-idx3-ubyte --labels train-labels-idx1-ubyte
    python -m idxio.plot_images t10k-images-idx3-ubyte -n 32 -c 8 -o digits.png
"""

import argparse
import logging
import math
import sys
from pathlib import Path

from .errors import IdxError
from .idx_archive import load_array

logger = logging.getLogger(__name__)


def load_images(filename, count=None):
    """Load an IDX image file as an (N, rows, cols) array."""
    images = load_array(filename)
    if images.ndim == 2:
        images = images[None, :, :]
    if images.ndim != 3:
        raise ValueError(
            f"{filename}: expected 2 or 3 dimensions, got shape {images.shape}"
        )
    if count is not None:
        images = images[:count]
    return images


def load_labels(filename, count=None):
    """Load a 1-D IDX label file."""
    labels = load_array(filename)
    if labels.ndim != 1:
        raise ValueError(f"{filename}: expected 1 dimension, got shape {labels.shape}")
    if count is not None:
        labels = labels[:count]
    return labels


def plot_images(
    filename, labels=None, count=16, columns=8, output=None, title=None, cellsize=1.0
):
    """Plot the first images of an IDX image file as a grid.

    Args:
        filename: IDX file of shape (N, rows, cols) or (rows, cols)
        labels: Optional IDX label file; labels become subplot titles
        count: Number of images to plot (default 16)
        columns: Number of grid columns (default 8)
        output: Output filename for plot (None = show interactively)
        title: Figure title (None = use filename)
        cellsize: Size of each grid cell in inches (default 1.0)
    """
    import matplotlib.pyplot as plt

    images = load_images(filename, count)
    label_values = load_labels(labels, len(images)) if labels else None
    logger.debug("Loaded %d images of shape %s", len(images), images.shape[1:])

    if len(images) == 0:
        print("No images to plot")
        return

    columns = max(1, min(columns, len(images)))
    rows = math.ceil(len(images) / columns)
    fig, axes = plt.subplots(
        rows,
        columns,
        figsize=(cellsize * columns, cellsize * rows),
        squeeze=False,
    )

    for i, ax in enumerate(axes.flat):
        ax.axis("off")
        if i >= len(images):
            continue
        ax.imshow(images[i], cmap="gray_r")
        if label_values is not None and i < len(label_values):
            ax.set_title(str(label_values[i]), fontsize="small")

    if title:
        fig.suptitle(title)
    else:
        fig.suptitle(Path(filename).name)

    plt.tight_layout()

    if output:
        plt.savefig(output, dpi=150)
        plt.close(fig)
        print(f"Saved plot to {output}")
    else:
        plt.show()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Plot images from IDX image files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s train-images-idx3-ubyte                 # Show the first 16 images
  %(prog)s images.idx -l labels.idx                # Title each image with its label
  %(prog)s images.idx -n 32 -c 8 -o digits.png     # Save a 4x8 grid to file
""",
    )

    parser.add_argument(
        "filename",
        help="IDX image file",
    )
    parser.add_argument(
        "-l",
        "--labels",
        help="IDX label file (1-D)",
    )
    parser.add_argument(
        "-n",
        "--count",
        type=int,
        default=16,
        help="Number of images to plot (default: 16)",
    )
    parser.add_argument(
        "-c",
        "--columns",
        type=int,
        default=8,
        help="Number of grid columns (default: 8)",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output filename for plot (default: show interactively)",
    )
    parser.add_argument(
        "-t",
        "--title",
        help="Plot title (default: filename)",
    )

    args = parser.parse_args(argv)

    for filename in (args.filename, args.labels):
        if filename and not Path(filename).exists():
            print(f"Error: file not found: {filename}")
            sys.exit(1)

    try:
        plot_images(
            args.filename,
            labels=args.labels,
            count=args.count,
            columns=args.columns,
            output=args.output,
            title=args.title,
        )
    except (IdxError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
