"""
Classification Pipeline - Photo to Roast Status

Implements one classification request end to end:
normalize -> encode -> infer (skin, color) -> interpret x2 -> report.

Architecture:
    - Initialize: the inference engine is injected, or built from the bundled
      model configs (model load failures surface as ModelLoadError).
    - Request: image decoding/normalization/encoding errors end the request
      with a typed error; per-model inference failures degrade to the
      ("error", 0.0) sentinel for that model only.
    - Observers: optional callables receiving PixelStats for each stage.
"""

import logging
from typing import Iterable, Optional

import numpy as np

from ..config import (
    DEFAULT_COLOR_MODEL_CONFIG,
    DEFAULT_DIAGNOSTICS_CONFIG,
    DEFAULT_INTERPRETER_CONFIG,
    DEFAULT_PREPROCESS_CONFIG,
    DEFAULT_SKIN_MODEL_CONFIG,
    DiagnosticsConfig,
    InterpreterConfig,
    ModelConfig,
    PreprocessConfig,
)
from ..Drivers.image_normalizer import ImageSource, load_image, normalize_image
from ..Drivers.tensor_encoder import encode_image
from ..exceptions import ClassificationError, CocoaRoastScanError
from .diagnostics import PixelObserver, analyze_pixels
from .inference_engine import InferenceEngine
from .presentation import ClassificationReport, build_report
from .result_interpreter import interpret_outcome

logger = logging.getLogger(__name__)


class ClassificationPipeline:
    """
    Classifies cocoa bean photos with the skin-condition and color models.
    """

    def __init__(
        self,
        engine: InferenceEngine,
        preprocess_config: Optional[PreprocessConfig] = None,
        interpreter_config: Optional[InterpreterConfig] = None,
        observers: Iterable[PixelObserver] = (),
        diagnostics_config: Optional[DiagnosticsConfig] = None,
    ):
        """
        Initialize classification pipeline.

        Args:
            engine: Inference engine owning both models
            preprocess_config: Image size, input scale, parallel inference
            interpreter_config: Bounds for accepting raw scores as probabilities
            observers: Callables receiving PixelStats per pipeline stage
            diagnostics_config: Sampling grid and thresholds for PixelStats
        """
        self.engine = engine
        self.preprocess_config = preprocess_config or DEFAULT_PREPROCESS_CONFIG
        self.interpreter_config = interpreter_config or DEFAULT_INTERPRETER_CONFIG
        self.diagnostics_config = diagnostics_config or DEFAULT_DIAGNOSTICS_CONFIG
        self.observers = list(observers)

    @classmethod
    def from_config(
        cls,
        skin_config: ModelConfig = DEFAULT_SKIN_MODEL_CONFIG,
        color_config: ModelConfig = DEFAULT_COLOR_MODEL_CONFIG,
        preprocess_config: Optional[PreprocessConfig] = None,
        interpreter_config: Optional[InterpreterConfig] = None,
        observers: Iterable[PixelObserver] = (),
        diagnostics_config: Optional[DiagnosticsConfig] = None,
    ) -> "ClassificationPipeline":
        """
        Build a pipeline around the bundled TFLite models.

        Raises:
            ModelLoadError: If either model cannot be loaded
        """
        engine = InferenceEngine.from_config(skin_config, color_config)
        return cls(engine, preprocess_config, interpreter_config, observers, diagnostics_config)

    def _observe(self, stage: str, image: np.ndarray) -> None:
        logger.debug(f"{stage} image size: {image.shape[1]}x{image.shape[0]}")
        if not self.observers:
            return
        stats = analyze_pixels(image, stage, self.diagnostics_config)
        for observer in self.observers:
            try:
                observer(stats)
            except Exception as e:
                logger.warning(f"Pixel observer failed on {stage}: {e}")

    def _encode(self, image, orientation) -> np.ndarray:
        cfg = self.preprocess_config
        normalized = normalize_image(image, orientation, cfg.image_size, on_stage=self._observe)
        return encode_image(normalized, cfg.input_scale, cfg.image_size)

    def classify(self, image, orientation=None) -> ClassificationReport:
        """
        Classify a decoded image.

        Args:
            image: Decoded RGB image (NumPy array or PIL image)
            orientation: Orientation, raw EXIF orientation code (int, not
                         degrees), or None

        Returns:
            ClassificationReport: Skin condition, bean color and roast status

        Raises:
            ImageDecodeError: If the image is absent or malformed
            TensorEncodingError: If the normalized image cannot be encoded
            ClassificationError: On any other failure before inference
        """
        try:
            tensor = self._encode(image, orientation)
        except CocoaRoastScanError:
            raise
        except Exception as e:
            logger.error(f"Error processing image: {e}", exc_info=True)
            raise ClassificationError(f"Error processing image: {e}") from e

        outcomes = self.engine.infer_all(tensor, parallel=self.preprocess_config.parallel_inference)
        skin = interpret_outcome(outcomes["skin"], self.engine.skin_model.labels, self.interpreter_config)
        color = interpret_outcome(outcomes["color"], self.engine.color_model.labels, self.interpreter_config)

        report = build_report(skin, color)
        logger.info(
            f"Classification: skin={skin.label} ({report.skin_confidence_pct}%), "
            f"color={color.label} ({report.color_confidence_pct}%), "
            f"roast status={report.roast_status}"
        )
        return report

    def classify_file(self, source: Optional[ImageSource]) -> ClassificationReport:
        """
        Decode an image file or encoded bytes, then classify it.

        Raises:
            ImageDecodeError: If the source cannot be decoded
        """
        image, orientation = load_image(source)
        return self.classify(image, orientation)

    def close(self) -> None:
        """Release both models."""
        self.engine.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures models are released."""
        try:
            self.close()
        except Exception as e:
            logger.error(f"Error during pipeline close: {e}", exc_info=True)
