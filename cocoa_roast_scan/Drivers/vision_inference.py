"""
TFLite Classifier Models

Loads the bundled cocoa bean classifiers with the TFLite interpreter and runs
forward passes on encoded tensors. Provides a mock model with the same
interface for testing without model files.
"""

import json
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

try:
    import tflite_runtime.interpreter as tflite
    TFLITE_AVAILABLE = True
except ImportError:
    try:
        import tensorflow.lite as tflite
        TFLITE_AVAILABLE = True
    except ImportError:
        tflite = None
        TFLITE_AVAILABLE = False

from ..config import IMG_SIZE, PIXEL_SIZE, TFLITE_NUM_THREADS, ModelConfig
from ..exceptions import ModelLoadError
from ..interfaces.model_interface import ClassifierModel

logger = logging.getLogger(__name__)

EXPECTED_INPUT_SHAPE = (1, IMG_SIZE, IMG_SIZE, PIXEL_SIZE)


def load_labels(labels_path: str) -> Tuple[str, ...]:
    """
    Read an ordered label list from a JSON sidecar.

    Accepts {"classes": [...]}, {"labels": [...]} or a bare list.

    Raises:
        ModelLoadError: If the file cannot be parsed or holds no labels
    """
    try:
        with open(labels_path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ModelLoadError(f"Failed to read labels from {labels_path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("classes", data.get("labels", []))
    if not isinstance(data, list) or not data or not all(isinstance(x, str) for x in data):
        raise ModelLoadError(f"No labels found in {labels_path}")
    return tuple(data)


class TFLiteModel(ClassifierModel):
    """
    TFLite image classifier.

    Loads the model once, checks the declared input/output tensors against
    the label set, and runs forward passes on (1, 256, 256, 3) float32 input.
    """

    def __init__(
        self,
        name: str,
        model_path: str,
        labels: Sequence[str] = (),
        labels_path: Optional[str] = None,
        num_threads: int = TFLITE_NUM_THREADS,
    ):
        """
        Initialize and load a TFLite classifier.

        Args:
            name: Model name used in logs
            model_path: Path to .tflite model file
            labels: Default class labels, used when no sidecar is found
            labels_path: Path to labels JSON. If None, inferred by replacing
                         .tflite with .json in model_path.
            num_threads: Interpreter thread count

        Raises:
            ModelLoadError: If the runtime, model or labels cannot be loaded
        """
        super().__init__(name, tuple(labels))
        self.model_path = model_path
        self.labels_path = labels_path or self._infer_labels_path(model_path)
        self.num_threads = num_threads
        self.interpreter = None
        self._input_index: Optional[int] = None
        self._output_index: Optional[int] = None
        self._input_shape: Tuple[int, ...] = EXPECTED_INPUT_SHAPE
        self._output_shape: Tuple[int, ...] = (1, len(self.labels))

        self._load()

    @classmethod
    def from_config(cls, config: ModelConfig) -> "TFLiteModel":
        return cls(
            name=config.name,
            model_path=config.model_path,
            labels=config.labels,
            labels_path=config.labels_path,
            num_threads=config.num_threads,
        )

    def __repr__(self):
        return f"TFLiteModel(name={self.name!r}, model_path={self.model_path!r}, loaded={self._is_loaded})"

    @property
    def input_shape(self) -> Tuple[int, ...]:
        return self._input_shape

    @property
    def output_shape(self) -> Tuple[int, ...]:
        return self._output_shape

    def _infer_labels_path(self, model_path: str) -> str:
        """Infer labels path: same stem as the model with .json."""
        return str(Path(model_path).with_suffix(".json"))

    def _load(self) -> None:
        """
        Load labels and model, then validate the declared tensor shapes.

        Raises:
            ModelLoadError: On any failure; the interpreter is released first
        """
        if not TFLITE_AVAILABLE:
            raise ModelLoadError("TFLite runtime not available. Install: pip install tflite-runtime")

        labels_file = Path(self.labels_path)
        if labels_file.exists():
            self.labels = load_labels(str(labels_file))
            logger.info(f"Loaded {len(self.labels)} labels from {self.labels_path}")
        else:
            logger.debug(f"Labels file not found: {self.labels_path}, using defaults {self.labels}")

        if not self.labels:
            raise ModelLoadError(f"No labels configured for model {self.name}")

        model_file = Path(self.model_path)
        if not model_file.exists():
            raise ModelLoadError(f"Model file not found: {self.model_path}")

        try:
            self.interpreter = tflite.Interpreter(
                model_path=str(model_file),
                num_threads=self.num_threads,
            )
            self.interpreter.allocate_tensors()

            input_details = self.interpreter.get_input_details()
            output_details = self.interpreter.get_output_details()
        except Exception as e:
            self.interpreter = None
            raise ModelLoadError(f"Failed to load TFLite model {self.model_path}: {e}") from e

        if not input_details or not output_details:
            self.interpreter = None
            raise ModelLoadError("Could not read model input/output details")

        inp = input_details[0]
        out = output_details[0]

        logger.debug(f"Model {self.name} - Input shape: {list(inp['shape'])}, dtype: {inp['dtype']}")
        logger.debug(f"Model {self.name} - Output shape: {list(out['shape'])}, dtype: {out['dtype']}")

        try:
            self._check_details(inp, out)
        except ModelLoadError:
            self.interpreter = None
            raise

        self._input_index = inp["index"]
        self._output_index = out["index"]
        self._input_shape = tuple(int(d) for d in inp["shape"])
        self._output_shape = tuple(int(d) for d in out["shape"])
        self._is_loaded = True
        logger.info(
            f"TFLite model loaded: {self.name} ({self.model_path}), "
            f"input shape={self._input_shape}, classes={len(self.labels)}"
        )

    def _check_details(self, inp: dict, out: dict) -> None:
        """Reject models whose declared tensors do not fit the pipeline."""
        input_shape = tuple(int(d) for d in inp["shape"])
        if input_shape != EXPECTED_INPUT_SHAPE:
            raise ModelLoadError(
                f"Model {self.name}: expected input shape {EXPECTED_INPUT_SHAPE}, got {input_shape}"
            )
        if np.dtype(inp["dtype"]) != np.float32:
            raise ModelLoadError(
                f"Model {self.name}: expected float32 input, got {np.dtype(inp['dtype'])}"
            )
        output_classes = int(out["shape"][-1])
        if output_classes != len(self.labels):
            raise ModelLoadError(
                f"Model {self.name}: output has {output_classes} classes "
                f"but {len(self.labels)} labels are configured"
            )

    def run(self, model_input: np.ndarray) -> np.ndarray:
        """
        Run inference on a batched input tensor.

        Args:
            model_input: (1, 256, 256, 3) float32 array

        Returns:
            np.ndarray: Score vector of length num_classes
        """
        if not self._is_loaded or self.interpreter is None:
            raise RuntimeError(f"Model {self.name} is not loaded")

        self.interpreter.set_tensor(self._input_index, model_input)
        self.interpreter.invoke()
        output = self.interpreter.get_tensor(self._output_index)
        return np.array(output[0], dtype=np.float32).reshape(-1)

    def close(self) -> None:
        """Release the interpreter."""
        if self.interpreter is not None:
            self.interpreter = None
            logger.debug(f"Model {self.name} released")
        self._is_loaded = False


ScoresSource = Union[Sequence[float], Callable[[np.ndarray], Sequence[float]]]


class MockClassifierModel(ClassifierModel):
    """
    Mock classifier for testing without model files.

    Returns scripted scores (a fixed vector or a callable of the input), or
    raises a scripted error from every run().
    """

    def __init__(
        self,
        name: str,
        labels: Sequence[str],
        outputs: Optional[ScoresSource] = None,
        error: Optional[Exception] = None,
        input_shape: Tuple[int, ...] = EXPECTED_INPUT_SHAPE,
    ):
        """
        Initialize mock model.

        Args:
            name: Model name used in logs
            labels: Class labels
            outputs: Fixed score vector, or callable(model_input) -> scores.
                     Defaults to a uniform distribution.
            error: Exception raised by run() instead of returning scores
            input_shape: Declared input shape
        """
        super().__init__(name, tuple(labels))
        self.outputs = outputs
        self.error = error
        self._input_shape = tuple(input_shape)
        self.inputs: List[np.ndarray] = []
        self.close_count = 0
        self._is_loaded = True
        logger.info(f"[MOCK] Model {self.name} initialized ({len(self.labels)} classes)")

    @property
    def input_shape(self) -> Tuple[int, ...]:
        return self._input_shape

    @property
    def output_shape(self) -> Tuple[int, ...]:
        return (1, len(self.labels))

    @property
    def call_count(self) -> int:
        return len(self.inputs)

    def run(self, model_input: np.ndarray) -> np.ndarray:
        if not self._is_loaded:
            raise RuntimeError(f"[MOCK] Model {self.name} is closed")

        self.inputs.append(model_input)
        if self.error is not None:
            raise self.error

        if self.outputs is None:
            scores = [1.0 / len(self.labels)] * len(self.labels)
        elif callable(self.outputs):
            scores = self.outputs(model_input)
        else:
            scores = self.outputs
        return np.asarray(scores, dtype=np.float32).reshape(-1)

    def close(self) -> None:
        self.close_count += 1
        self._is_loaded = False
        logger.debug(f"[MOCK] Model {self.name} released")
