"""
Writing numeric series to gnuplot data files.

Files are plain whitespace-separated columns, one row per line, no header.
"""

from collections.abc import Sequence
from typing import Any, TextIO

import numpy as np

from ..utils.exceptions import DataError


def format_number(value: float) -> str:
    """
    Format a number the way it is written to data files and commands.

    Uses the shortest text that round-trips the float, dropping a trailing
    ".0" so whole numbers read as integers.

    Example:
        >>> format_number(1.0), format_number(0.25), format_number(-3)
        ('1', '0.25', '-3')
    """
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def as_column(values: Sequence[float] | np.ndarray | Any) -> np.ndarray:
    """
    Coerce a numeric sequence to a one-dimensional float array.

    Raises:
        DataError: If the values are not numeric or not one-dimensional
    """
    try:
        column = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DataError(f"Sequence is not numeric: {e}") from e
    if column.ndim != 1:
        raise DataError(f"Sequence must be one-dimensional, got {column.ndim} dimensions")
    return column


def check_columns(*columns: Sequence[float] | np.ndarray) -> list[np.ndarray]:
    """
    Validate series that are plotted together.

    Args:
        *columns: One or more numeric sequences

    Returns:
        The sequences as float arrays

    Raises:
        DataError: If any sequence is empty or their lengths differ
    """
    arrays = [as_column(column) for column in columns]

    if any(array.size == 0 for array in arrays):
        raise DataError("Sequences too small" if len(arrays) > 1 else "Sequence too small")

    if len({array.size for array in arrays}) > 1:
        raise DataError("Length of the sequences differs")

    return arrays


def write_columns(fh: TextIO, *columns: np.ndarray) -> int:
    """
    Write equal-length columns side by side.

    Args:
        fh: Open text file
        *columns: Arrays from check_columns()

    Returns:
        Number of rows written
    """
    rows = 0
    for row in zip(*columns):
        fh.write(" ".join(format_number(value) for value in row))
        fh.write("\n")
        rows += 1
    return rows


def image_pixels(buffer: bytes | Sequence[int] | np.ndarray, width: int, height: int) -> np.ndarray:
    """
    View an 8-bit grey image buffer as a (height, width) array.

    Args:
        buffer: At least width * height intensity bytes in row-major order
        width: Image width in pixels
        height: Image height in pixels

    Raises:
        DataError: If the dimensions are not positive or the buffer is short
    """
    if width <= 0 or height <= 0:
        raise DataError(f"Image dimensions must be positive, got {width}x{height}")

    if isinstance(buffer, (bytes, bytearray, memoryview)):
        pixels = np.frombuffer(buffer, dtype=np.uint8)
    else:
        pixels = np.asarray(buffer, dtype=np.uint8).ravel()

    if pixels.size < width * height:
        raise DataError(
            f"Image buffer too small: {pixels.size} bytes for {width}x{height} pixels"
        )
    return pixels[: width * height].reshape(height, width)


def write_image(fh: TextIO, pixels: np.ndarray) -> int:
    """
    Write an image as "column row intensity" rows.

    Args:
        fh: Open text file
        pixels: Array from image_pixels()

    Returns:
        Number of rows written
    """
    height, width = pixels.shape
    for row in range(height):
        for column in range(width):
            fh.write(f"{column} {row} {format_number(pixels[row, column])}\n")
    return width * height
