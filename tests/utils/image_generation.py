"""Synthetic test images."""

import io

import numpy as np
from PIL import Image


def uniform_image(width: int, height: int, color=(128, 128, 128)) -> np.ndarray:
    """Create an RGB uint8 image filled with one color."""
    return np.full((height, width, 3), color, dtype=np.uint8)


def random_image(width: int, height: int, seed: int = 0) -> np.ndarray:
    """Create a reproducible RGB uint8 noise image."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def encoded_image(width: int, height: int, fmt: str = "JPEG", orientation=None, color=(200, 120, 40)) -> bytes:
    """Create encoded image bytes, optionally carrying an EXIF orientation."""
    img = Image.new("RGB", (width, height), color=color)
    buf = io.BytesIO()
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        img.save(buf, format=fmt, exif=exif.tobytes())
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()
