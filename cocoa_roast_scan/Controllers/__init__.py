"""
Controllers Module

This module contains the logic that coordinates the drivers into one
classification request.

Controllers:
    - InferenceEngine: Runs both classifiers, isolating per-model failures
    - ClassificationPipeline: Photo -> skin condition, bean color, roast status
"""

from .inference_engine import InferenceEngine, InferenceOutcome
from .result_interpreter import ClassificationResult, interpret, softmax
from .presentation import ClassificationReport, build_report
from .classification_pipeline import ClassificationPipeline

__all__ = [
    'InferenceEngine', 'InferenceOutcome',
    'ClassificationResult', 'interpret', 'softmax',
    'ClassificationReport', 'build_report',
    'ClassificationPipeline',
]
