"""
Cocoa Roast Scan

Classifies photos of cocoa beans by skin condition (peeled / not peeled) and
color (brown / light brown / black), deriving the roast status from the color.
"""

from .Controllers import ClassificationPipeline, ClassificationReport, InferenceEngine
from .config import InputScale
from .Drivers import Orientation
from .exceptions import (
    ClassificationError,
    CocoaRoastScanError,
    ImageDecodeError,
    ModelLoadError,
    TensorEncodingError,
)

__version__ = "1.0.0"

__all__ = [
    'ClassificationPipeline', 'ClassificationReport', 'InferenceEngine',
    'InputScale', 'Orientation',
    'CocoaRoastScanError', 'ModelLoadError', 'ImageDecodeError',
    'TensorEncodingError', 'ClassificationError',
]
