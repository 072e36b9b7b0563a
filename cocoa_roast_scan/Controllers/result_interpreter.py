"""
Result Interpreter

Turns a model's raw score vector into a probability distribution and picks
the winning label. Vectors that already look like a distribution are used
as-is; anything else is treated as logits and passed through softmax.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from ..config import DEFAULT_INTERPRETER_CONFIG, ERROR_LABEL, InterpreterConfig
from .inference_engine import InferenceOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    """Winning label of one model and its probability."""
    label: str
    confidence: float
    probabilities: Tuple[float, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.label == ERROR_LABEL


ERROR_RESULT = ClassificationResult(label=ERROR_LABEL, confidence=0.0)


def softmax(values: Sequence[float]) -> np.ndarray:
    """Numerically stable softmax: the maximum is subtracted before exp()."""
    x = np.asarray(values, dtype=np.float64)
    exps = np.exp(x - np.max(x))
    return exps / np.sum(exps)


def is_distribution(
    scores: np.ndarray,
    config: InterpreterConfig = DEFAULT_INTERPRETER_CONFIG,
) -> bool:
    """
    True if scores are non-negative and sum to within the configured bounds.

    The sum and the bounds are compared in float32, the models' output type,
    so vectors landing exactly on a bound are accepted.
    """
    scores32 = np.asarray(scores, dtype=np.float32)
    total = np.sum(scores32, dtype=np.float32)
    in_bounds = np.float32(config.sum_lower) <= total <= np.float32(config.sum_upper)
    return bool(in_bounds) and not bool(np.any(scores32 < 0))


def to_probabilities(
    scores: Sequence[float],
    config: InterpreterConfig = DEFAULT_INTERPRETER_CONFIG,
) -> np.ndarray:
    """
    Return scores as a probability distribution.

    Args:
        scores: Raw model output
        config: Sum bounds for accepting the scores unmodified

    Returns:
        np.ndarray: The scores themselves when they already form a
                    distribution, otherwise their softmax

    Raises:
        ValueError: If scores is empty or not finite
    """
    arr = np.asarray(scores, dtype=np.float64).reshape(-1)
    if arr.size == 0:
        raise ValueError("Empty score vector")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Non-finite scores: {arr.tolist()}")

    if is_distribution(arr, config):
        logger.debug(f"Using raw probabilities (sum={arr.sum():.4f})")
        return arr

    logger.debug(f"Applying softmax (sum={arr.sum():.4f})")
    return softmax(arr)


def argmax_first(values: np.ndarray) -> int:
    """Index of the maximum; the first occurrence wins ties."""
    # np.argmax returns the first occurrence
    return int(np.argmax(values))


def interpret(
    scores: Sequence[float],
    labels: Sequence[str],
    config: InterpreterConfig = DEFAULT_INTERPRETER_CONFIG,
) -> ClassificationResult:
    """
    Pick the most probable label for a raw score vector.

    Args:
        scores: Raw model output
        labels: Class labels, index-aligned with scores

    Returns:
        ClassificationResult: (label, confidence, full distribution)
    """
    probabilities = to_probabilities(scores, config)
    idx = argmax_first(probabilities)
    if len(labels) != probabilities.size:
        logger.warning(f"{probabilities.size} scores for {len(labels)} labels")
    label = labels[idx] if idx < len(labels) else f"class_{idx}"
    return ClassificationResult(
        label=label,
        confidence=float(probabilities[idx]),
        probabilities=tuple(float(p) for p in probabilities),
    )


def interpret_outcome(
    outcome: Optional[InferenceOutcome],
    labels: Sequence[str],
    config: InterpreterConfig = DEFAULT_INTERPRETER_CONFIG,
) -> ClassificationResult:
    """
    Interpret an inference outcome; failures become the ("error", 0.0) sentinel.
    """
    if outcome is None or not outcome.ok:
        reason = outcome.error if outcome is not None else "no outcome"
        logger.warning(f"Inference failed, returning sentinel result: {reason}")
        return ERROR_RESULT

    try:
        result = interpret(outcome.scores, labels, config)
    except ValueError as e:
        logger.error(f"Model {outcome.model_name} produced unusable scores: {e}")
        return ERROR_RESULT

    for i, p in enumerate(result.probabilities):
        name = labels[i] if i < len(labels) else f"class_{i}"
        logger.debug(f"{outcome.model_name} - Index {i}: {name} = {p:.4f}")
    logger.info(f"{outcome.model_name}: {result.label} with confidence {result.confidence:.4f}")
    return result
