"""
Model and Image Drivers Module

This module contains the low-level building blocks of the classification
pipeline: image decoding/normalization, tensor encoding, and the concrete
classifier models that conform to the interface defined in interfaces/.

Drivers:
    - image_normalizer: Decode, EXIF orientation, rotate, resize to 256x256
    - tensor_encoder: Flat float32 RGB-interleaved model input
    - TFLiteModel: TFLite classifier with shape checks
    - MockClassifierModel: Mock implementation for testing without model files
"""

from .image_normalizer import Orientation, load_image, normalize_image, read_orientation
from .tensor_encoder import encode_image, to_model_input
from .vision_inference import TFLiteModel, MockClassifierModel, TFLITE_AVAILABLE

__all__ = [
    'Orientation', 'load_image', 'normalize_image', 'read_orientation',
    'encode_image', 'to_model_input',
    'TFLiteModel', 'MockClassifierModel', 'TFLITE_AVAILABLE',
]
