"""
Tensor Encoder

Turns a normalized 256x256 RGB image into the flat float32 buffer the
classifiers were trained on: rows outer, columns inner, R/G/B interleaved.
"""

import logging

import numpy as np

from ..config import IMG_SIZE, PIXEL_SIZE, InputScale
from ..exceptions import TensorEncodingError

logger = logging.getLogger(__name__)


def encode_image(
    image: np.ndarray,
    input_scale: InputScale = InputScale.RAW,
    image_size: int = IMG_SIZE,
) -> np.ndarray:
    """
    Encode a normalized image as a flat, read-only float32 tensor.

    Args:
        image: (image_size, image_size, 3) RGB array
        input_scale: RAW keeps values in 0-255, UNIT divides them by 255
        image_size: Expected edge length

    Returns:
        np.ndarray: float32 array of length image_size * image_size * 3

    Raises:
        TensorEncodingError: If the image does not have the expected shape
    """
    expected = (image_size, image_size, PIXEL_SIZE)
    if image is None or tuple(np.shape(image)) != expected:
        raise TensorEncodingError(
            f"Expected normalized image of shape {expected}, "
            f"got {None if image is None else np.shape(image)}"
        )

    # C-order ravel of (H, W, C) is exactly row-major, channel-interleaved
    tensor = np.asarray(image, dtype=np.float32).ravel(order="C").copy()
    if input_scale is InputScale.UNIT:
        tensor /= 255.0

    tensor.flags.writeable = False
    logger.debug(
        f"Encoded tensor: length={tensor.size}, scale={input_scale.value}, "
        f"range=[{tensor.min():.1f}, {tensor.max():.1f}]"
    )
    return tensor


def to_model_input(tensor: np.ndarray, image_size: int = IMG_SIZE) -> np.ndarray:
    """
    Independent (1, H, W, 3) copy of an encoded tensor for a single model.

    Each model receives its own copy so one inference call can never
    disturb what another one reads.
    """
    expected_length = image_size * image_size * PIXEL_SIZE
    if tensor.size != expected_length:
        raise TensorEncodingError(
            f"Expected tensor of length {expected_length}, got {tensor.size}"
        )
    return np.array(tensor, dtype=np.float32, copy=True).reshape(
        1, image_size, image_size, PIXEL_SIZE
    )
