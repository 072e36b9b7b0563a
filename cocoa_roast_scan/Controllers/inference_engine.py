"""
Inference Engine - Runs Both Classifiers on One Encoded Tensor

Owns the skin-condition and bean-color models for the lifetime of the
pipeline. Forward passes never raise: every call returns an explicit
InferenceOutcome, so a failure in one model leaves the other untouched.

Architecture:
    - Models are injected (or loaded once via from_config) and read-only afterwards.
    - Each model receives its own copy of the read-only encoded tensor.
    - infer_all() runs the models sequentially, or on two worker threads.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from ..config import (
    DEFAULT_COLOR_MODEL_CONFIG,
    DEFAULT_SKIN_MODEL_CONFIG,
    IMG_SIZE,
    ModelConfig,
)
from ..Drivers.tensor_encoder import to_model_input
from ..Drivers.vision_inference import TFLiteModel
from ..exceptions import ModelLoadError
from ..interfaces.model_interface import ClassifierModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InferenceOutcome:
    """Result of one forward pass: scores on success, error message on failure."""
    model_name: str
    scores: Optional[np.ndarray] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.scores is not None

    @classmethod
    def success(cls, model_name: str, scores: np.ndarray) -> "InferenceOutcome":
        return cls(model_name=model_name, scores=scores)

    @classmethod
    def failure(cls, model_name: str, error: str) -> "InferenceOutcome":
        return cls(model_name=model_name, error=error)


class InferenceEngine:
    """
    Holds the two classifiers and runs forward inference on encoded tensors.
    """

    def __init__(
        self,
        skin_model: ClassifierModel,
        color_model: ClassifierModel,
        image_size: int = IMG_SIZE,
    ):
        """
        Initialize inference engine.

        Args:
            skin_model: Skin-condition classifier (dikupas / tidak_dikupas)
            color_model: Bean-color classifier (cokelat / cokelat_muda / hitam)
            image_size: Edge length of the encoded image
        """
        self.skin_model = skin_model
        self.color_model = color_model
        self.image_size = image_size
        self._closed = False

    @classmethod
    def from_config(
        cls,
        skin_config: ModelConfig = DEFAULT_SKIN_MODEL_CONFIG,
        color_config: ModelConfig = DEFAULT_COLOR_MODEL_CONFIG,
    ) -> "InferenceEngine":
        """
        Load both bundled TFLite models.

        Raises:
            ModelLoadError: If either model cannot be loaded. A model loaded
                            before the failure is released.
        """
        skin_model = TFLiteModel.from_config(skin_config)
        try:
            color_model = TFLiteModel.from_config(color_config)
        except ModelLoadError:
            skin_model.close()
            raise
        logger.info("Models loaded successfully")
        return cls(skin_model, color_model)

    @property
    def models(self) -> Dict[str, ClassifierModel]:
        return {self.skin_model.name: self.skin_model, self.color_model.name: self.color_model}

    def infer(self, model: ClassifierModel, tensor: np.ndarray) -> InferenceOutcome:
        """
        Run one model on an encoded tensor.

        Args:
            model: Classifier to run
            tensor: Flat read-only encoded tensor

        Returns:
            InferenceOutcome: Scores, or the error that stopped the forward pass
        """
        if self._closed:
            return InferenceOutcome.failure(model.name, "Inference engine is closed")

        try:
            model_input = to_model_input(tensor, self.image_size)
            scores = np.asarray(model.run(model_input), dtype=np.float32).reshape(-1)
        except Exception as e:
            logger.error(f"Error during {model.name} inference: {e}", exc_info=True)
            return InferenceOutcome.failure(model.name, str(e) or type(e).__name__)

        if scores.size != model.num_classes:
            message = f"Expected {model.num_classes} scores, got {scores.size}"
            logger.error(f"{model.name} output size mismatch: {message}")
            return InferenceOutcome.failure(model.name, message)

        logger.debug(f"{model.name} raw output: {scores.tolist()} (sum={float(scores.sum()):.4f})")
        return InferenceOutcome.success(model.name, scores)

    def infer_all(self, tensor: np.ndarray, parallel: bool = False) -> Dict[str, InferenceOutcome]:
        """
        Run both models on the same tensor.

        Args:
            tensor: Flat read-only encoded tensor
            parallel: Run the two models on separate worker threads

        Returns:
            dict: {"skin": outcome, "color": outcome}
        """
        if not parallel:
            return {
                "skin": self.infer(self.skin_model, tensor),
                "color": self.infer(self.color_model, tensor),
            }

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="inference") as pool:
            skin_future = pool.submit(self.infer, self.skin_model, tensor)
            color_future = pool.submit(self.infer, self.color_model, tensor)
            return {"skin": skin_future.result(), "color": color_future.result()}

    def close(self) -> None:
        """Release both models. Safe to call more than once."""
        for model in (self.skin_model, self.color_model):
            try:
                model.close()
            except Exception as e:
                logger.error(f"Error releasing model {model.name}: {e}", exc_info=True)
        if not self._closed:
            logger.info("Inference engine closed")
        self._closed = True

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures models are released."""
        self.close()
