"""
Image Normalizer

Decodes photos of cocoa beans, reads their EXIF orientation, and produces the
upright, fixed-size (256x256) RGB pixel buffer consumed by the tensor encoder.
Decoding and EXIF use Pillow; rotation and resampling use OpenCV.
"""

import logging
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import cv2
import numpy as np
from PIL import Image

from ..config import IMG_SIZE, PIXEL_SIZE
from ..exceptions import ImageDecodeError

logger = logging.getLogger(__name__)

# EXIF tag holding the camera orientation
EXIF_ORIENTATION_TAG = 0x0112
EXIF_ORIENTATION_CODES = range(0, 9)

ImageSource = Union[str, Path, bytes, bytearray]


class Orientation(Enum):
    """Clockwise rotation needed to display an image upright."""
    NONE = 0
    ROTATE_90 = 90
    ROTATE_180 = 180
    ROTATE_270 = 270

    @classmethod
    def from_exif(cls, value: Optional[int]) -> "Orientation":
        """
        Map an EXIF orientation value to a rotation.

        Only the pure rotations (3, 6, 8) are honored; undefined, normal and
        mirrored values all map to NONE.
        """
        return _EXIF_TO_ORIENTATION.get(value, cls.NONE)


_EXIF_TO_ORIENTATION = {
    3: Orientation.ROTATE_180,
    6: Orientation.ROTATE_90,
    8: Orientation.ROTATE_270,
}

_ROTATE_CODES = {
    Orientation.ROTATE_90: cv2.ROTATE_90_CLOCKWISE,
    Orientation.ROTATE_180: cv2.ROTATE_180,
    Orientation.ROTATE_270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def _open(source: ImageSource) -> Image.Image:
    """Open a path or encoded bytes with Pillow (lazy, not yet decoded)."""
    if isinstance(source, (bytes, bytearray)):
        return Image.open(BytesIO(bytes(source)))
    if isinstance(source, (str, Path)):
        return Image.open(Path(source))
    raise ImageDecodeError(f"Unsupported image source type: {type(source).__name__}")


def coerce_orientation(orientation) -> Orientation:
    """
    Accept None, an Orientation, or a raw EXIF orientation code (int, 0-8).

    Ints are EXIF codes, not degrees: 6 means ROTATE_90, while 90 is not a
    valid code. Anything unrecognized is treated as "no rotation".
    """
    if orientation is None:
        return Orientation.NONE
    if isinstance(orientation, Orientation):
        return orientation
    if isinstance(orientation, (int, np.integer)):
        code = int(orientation)
        if code not in EXIF_ORIENTATION_CODES:
            logger.warning(f"{code} is not an EXIF orientation code (0-8), assuming none")
        return Orientation.from_exif(code)
    logger.warning(f"Unrecognized orientation {orientation!r}, assuming none")
    return Orientation.NONE


def read_orientation(source: Union[ImageSource, Image.Image]) -> Orientation:
    """
    Read the EXIF orientation of an image.

    Never raises: missing or unreadable metadata yields Orientation.NONE.

    Args:
        source: File path, encoded bytes, or an opened PIL image

    Returns:
        Orientation: Rotation to apply, NONE if unknown
    """
    try:
        if isinstance(source, Image.Image):
            value = source.getexif().get(EXIF_ORIENTATION_TAG)
        else:
            with _open(source) as img:
                value = img.getexif().get(EXIF_ORIENTATION_TAG)
        orientation = Orientation.from_exif(value)
    except Exception as e:
        logger.warning(f"Error reading EXIF data, assuming no rotation: {e}")
        return Orientation.NONE

    logger.debug(f"EXIF orientation={value} -> {orientation.name}")
    return orientation


def as_rgb_array(image) -> np.ndarray:
    """
    Validate a decoded image and return it as a contiguous (H, W, 3) uint8 array.

    Grayscale arrays are expanded to three channels and alpha is dropped.

    Raises:
        ImageDecodeError: If the image is absent, empty or not an image array
    """
    if image is None:
        raise ImageDecodeError("No image data found")

    if isinstance(image, Image.Image):
        image = image.convert("RGB")

    arr = np.asarray(image)
    if arr.size == 0:
        raise ImageDecodeError("Empty image array")

    if arr.ndim == 2:
        arr = np.stack([arr] * PIXEL_SIZE, axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ImageDecodeError(f"Expected an (H, W, 3) RGB image, got shape {arr.shape}")
    if arr.shape[2] == 4:
        arr = arr[:, :, :PIXEL_SIZE]

    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)

    return np.ascontiguousarray(arr)


def load_image(source: Optional[ImageSource]) -> Tuple[np.ndarray, Orientation]:
    """
    Decode an image file or encoded bytes.

    Args:
        source: File path or encoded image bytes (JPEG, PNG, ...)

    Returns:
        tuple: (RGB uint8 array of shape (H, W, 3), EXIF orientation)

    Raises:
        ImageDecodeError: If the source is absent or cannot be decoded
    """
    if source is None:
        raise ImageDecodeError("No image data found")

    try:
        with _open(source) as img:
            img.load()
            orientation = read_orientation(img)
            logger.debug(f"Decoded image: size={img.size}, mode={img.mode}")
            rgb = as_rgb_array(img)
    except ImageDecodeError:
        raise
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Failed to load image: {e}") from e

    return rgb, orientation


def rotate_image(image: np.ndarray, orientation) -> np.ndarray:
    """
    Rotate an image clockwise so that it displays upright.

    Returns the input unchanged for Orientation.NONE / None.
    """
    orientation = coerce_orientation(orientation)
    code = _ROTATE_CODES.get(orientation)
    if code is None:
        return image
    return cv2.rotate(image, code)


def resize_image(image: np.ndarray, size: int = IMG_SIZE) -> np.ndarray:
    """Scale both dimensions to size x size (aspect ratio ignored), bilinear."""
    if image.shape[:2] == (size, size):
        return image
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)


def normalize_image(
    image,
    orientation=None,
    size: int = IMG_SIZE,
    on_stage: Optional[Callable[[str, np.ndarray], None]] = None,
) -> np.ndarray:
    """
    Orientation-correct and resize a decoded image.

    Args:
        image: Decoded RGB image (NumPy array or PIL image)
        orientation: Orientation, raw EXIF code, or None for no rotation
        size: Output edge length in pixels
        on_stage: Optional callback(stage, array) invoked with the
                  "original", "rotated" (only when rotated) and
                  "preprocessed" images

    Returns:
        np.ndarray: (size, size, 3) uint8 RGB array

    Raises:
        ImageDecodeError: If the image is absent or malformed
    """
    arr = as_rgb_array(image)
    if on_stage is not None:
        on_stage("original", arr)

    rotated = rotate_image(arr, orientation)
    if on_stage is not None and rotated is not arr:
        on_stage("rotated", rotated)

    normalized = resize_image(rotated, size)
    if on_stage is not None:
        on_stage("preprocessed", normalized)
    return normalized
