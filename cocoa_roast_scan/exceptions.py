"""Exceptions raised by the classification core."""


class CocoaRoastScanError(Exception):
    """Base class for all Cocoa Roast Scan errors."""
    pass


class ModelLoadError(CocoaRoastScanError):
    """Exception raised when a bundled model cannot be loaded."""
    pass


class ImageDecodeError(CocoaRoastScanError):
    """Exception raised for unreadable, absent or malformed input images."""
    pass


class TensorEncodingError(CocoaRoastScanError):
    """Exception raised when a normalized image cannot be encoded."""
    pass


class ClassificationError(CocoaRoastScanError):
    """Exception raised for unexpected failures inside a classification request."""
    pass
