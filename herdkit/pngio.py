"""Loading and saving RGBA PNG images as flat pixel arrays."""

from __future__ import annotations

import enum
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError


class Origin(enum.Enum):
    """Which image row comes first in a flat pixel array."""

    LOWER_LEFT = "lower_left"
    UPPER_LEFT = "upper_left"


def load_png(filename, origin: Origin) -> tuple[tuple[int, int], np.ndarray]:
    """Read a PNG as ``((width, height), pixels)`` with pixels of shape (w*h, 4), uint8 RGBA.

    Raises OSError if the file cannot be opened and ValueError if it is not a readable PNG.
    """
    path = Path(filename)
    try:
        handle = path.open("rb")
    except OSError as exc:
        raise OSError(f"Failed to open PNG image file '{filename}'.") from exc
    with handle:
        try:
            with Image.open(handle) as image:
                if image.format != "PNG":
                    raise ValueError(f"Failed to read PNG image from '{filename}'.")
                rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ValueError(f"Failed to read PNG image from '{filename}'.") from exc
    height, width = rgba.shape[:2]
    if origin is Origin.LOWER_LEFT:
        rgba = rgba[::-1]
    return (width, height), np.ascontiguousarray(rgba).reshape(width * height, 4)


def save_png(filename, size, data, origin: Origin) -> None:
    """Write ``data`` (w*h RGBA pixels) of the given ``(width, height)`` as a PNG file."""
    width, height = (int(v) for v in size)
    pixels = np.asarray(data, dtype=np.uint8)
    if pixels.size != width * height * 4:
        raise ValueError(
            f"Expected {width * height} RGBA pixels for a {width}x{height} image, "
            f"got {pixels.size // 4}."
        )
    rows = pixels.reshape(height, width, 4)
    if origin is Origin.LOWER_LEFT:
        rows = rows[::-1]
    Image.fromarray(np.ascontiguousarray(rows)).save(filename, format="PNG")