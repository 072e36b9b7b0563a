"""
Classifier Model Interface - Abstract Base Class for Image Classifiers

This interface defines the standard contract for classification models.
All model implementations (e.g., TFLite interpreter, mock model) must
conform to this interface so the inference engine can work with any of them.

Model Context:
    - Input tensor: 1 x 256 x 256 x 3, float32, RGB interleaved
    - Output tensor: 1 x num_classes, float32
    - Skin condition model: 2 classes
    - Bean color model: 3 classes
"""

from abc import ABC, abstractmethod
from typing import Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


class ClassifierModel(ABC):
    """
    Abstract base class defining the interface for classification models.

    A model is loaded once, treated as read-only afterwards, and released
    with close(). Implementations must make close() idempotent.
    """

    def __init__(self, name: str, labels: Tuple[str, ...]):
        """
        Initialize the model interface.

        Args:
            name: Short model name used in logs (e.g. "skin_condition")
            labels: Class labels, index-aligned with the model output
        """
        self.name = name
        self.labels: Tuple[str, ...] = tuple(labels)
        self._is_loaded = False

    @property
    def is_loaded(self) -> bool:
        """True between a successful load and close()."""
        return self._is_loaded

    @property
    def num_classes(self) -> int:
        return len(self.labels)

    @property
    @abstractmethod
    def input_shape(self) -> Tuple[int, ...]:
        """Declared input tensor shape, e.g. (1, 256, 256, 3)."""
        pass

    @property
    @abstractmethod
    def output_shape(self) -> Tuple[int, ...]:
        """Declared output tensor shape, e.g. (1, 3)."""
        pass

    @abstractmethod
    def run(self, model_input: np.ndarray) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            model_input: Batched input tensor matching input_shape. The model
                         owns this array for the duration of the call.

        Returns:
            np.ndarray: Flat score vector of length num_classes

        Raises:
            RuntimeError: If the model is closed or the forward pass fails
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release the underlying model resources.

        Must be idempotent (safe to call multiple times).
        """
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures the model is released."""
        try:
            self.close()
        except Exception as e:
            logger.error(f"Error releasing model {self.name}: {e}", exc_info=True)
