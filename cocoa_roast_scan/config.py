"""
Central configuration for Cocoa Roast Scan.

Model locations, label orderings, preprocessing and post-processing
constants are centralized here. Use dataclasses for type safety.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


# --- Project Paths ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent
MODELS_DIR = PROJECT_ROOT / "models"
SKIN_MODEL_PATH = MODELS_DIR / "mobilenetv2_model_a_20250621_0107.tflite"
COLOR_MODEL_PATH = MODELS_DIR / "mobilenetv2_model_d_warna_20250621_0202.tflite"

# --- ML / TFLite ---
IMG_SIZE = 256
PIXEL_SIZE = 3
TENSOR_LENGTH = IMG_SIZE * IMG_SIZE * PIXEL_SIZE
TFLITE_NUM_THREADS = 4

# Training-time class order (alphabetical). A label sidecar next to the
# model file overrides these.
SKIN_LABELS: Tuple[str, ...] = ("dikupas", "tidak_dikupas")
COLOR_LABELS: Tuple[str, ...] = ("cokelat", "cokelat_muda", "hitam")

# Label returned for a model whose inference failed
ERROR_LABEL = "error"


class InputScale(Enum):
    """Value range of the encoded tensor."""
    RAW = "raw"    # 0-255, unscaled
    UNIT = "unit"  # 0-1, divided by 255


@dataclass(frozen=True)
class ModelConfig:
    """
    One bundled classifier: where it lives and how its outputs are labelled.
    """
    name: str
    model_path: str
    labels: Tuple[str, ...]
    labels_path: Optional[str] = None  # None: <model stem>.json if present
    num_threads: int = TFLITE_NUM_THREADS


@dataclass(frozen=True)
class PreprocessConfig:
    """
    Image normalization and tensor encoding settings.
    """
    image_size: int = IMG_SIZE
    input_scale: InputScale = InputScale.RAW
    parallel_inference: bool = False  # Run both models on worker threads


@dataclass(frozen=True)
class InterpreterConfig:
    """
    Bounds inside which a raw score vector is accepted as a distribution.
    Outside them (or with any negative score) softmax is applied.
    """
    sum_lower: float = 0.9
    sum_upper: float = 1.1


@dataclass(frozen=True)
class DiagnosticsConfig:
    """
    Pixel sampling thresholds used by the diagnostics observers.
    """
    grid: int = 10                    # grid x grid sampled pixels
    bright_threshold: float = 240.0   # Average brightness above -> very bright
    variation_threshold: int = 20     # Channel spread below -> low variation


# --- Default config instances ---
DEFAULT_SKIN_MODEL_CONFIG = ModelConfig(
    name="skin_condition",
    model_path=str(SKIN_MODEL_PATH),
    labels=SKIN_LABELS,
)
DEFAULT_COLOR_MODEL_CONFIG = ModelConfig(
    name="bean_color",
    model_path=str(COLOR_MODEL_PATH),
    labels=COLOR_LABELS,
)
DEFAULT_PREPROCESS_CONFIG = PreprocessConfig()
DEFAULT_INTERPRETER_CONFIG = InterpreterConfig()
DEFAULT_DIAGNOSTICS_CONFIG = DiagnosticsConfig()
