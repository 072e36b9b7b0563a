"""Shared fixtures: synthetic images, mock classifiers and a fake TFLite runtime."""

import types

import numpy as np
import pytest

from cocoa_roast_scan.config import COLOR_LABELS, SKIN_LABELS
from cocoa_roast_scan.Controllers.classification_pipeline import ClassificationPipeline
from cocoa_roast_scan.Controllers.inference_engine import InferenceEngine
from cocoa_roast_scan.Drivers import vision_inference
from cocoa_roast_scan.Drivers.vision_inference import MockClassifierModel


@pytest.fixture
def skin_model() -> MockClassifierModel:
    return MockClassifierModel("skin_condition", SKIN_LABELS, outputs=[0.9, 0.1])


@pytest.fixture
def color_model() -> MockClassifierModel:
    return MockClassifierModel("bean_color", COLOR_LABELS, outputs=[0.1, 0.1, 0.8])


@pytest.fixture
def engine(skin_model, color_model) -> InferenceEngine:
    return InferenceEngine(skin_model, color_model)


@pytest.fixture
def pipeline(engine) -> ClassificationPipeline:
    return ClassificationPipeline(engine)


class FakeInterpreter:
    """Stands in for tflite.Interpreter; configured through class attributes."""

    input_shape = (1, 256, 256, 3)
    input_dtype = np.float32
    output_scores = [0.25, 0.75]
    load_error = None

    def __init__(self, model_path, num_threads=None):
        if self.load_error is not None:
            raise self.load_error
        self.model_path = model_path
        self.num_threads = num_threads
        self.last_input = None

    def allocate_tensors(self):
        pass

    def get_input_details(self):
        return [{"index": 0, "shape": np.array(self.input_shape), "dtype": self.input_dtype}]

    def get_output_details(self):
        return [{"index": 1, "shape": np.array([1, len(self.output_scores)]), "dtype": np.float32}]

    def set_tensor(self, index, value):
        self.last_input = np.array(value)

    def invoke(self):
        pass

    def get_tensor(self, index):
        return np.array([self.output_scores], dtype=np.float32)


@pytest.fixture
def fake_tflite(monkeypatch):
    """Install a fake TFLite runtime; returns a fresh FakeInterpreter subclass to configure."""
    interpreter_cls = type("ConfiguredFakeInterpreter", (FakeInterpreter,), {})
    monkeypatch.setattr(vision_inference, "tflite", types.SimpleNamespace(Interpreter=interpreter_cls))
    monkeypatch.setattr(vision_inference, "TFLITE_AVAILABLE", True)
    return interpreter_cls


@pytest.fixture
def model_file(tmp_path):
    """An (opaque) model file on disk for the fake runtime to 'load'."""
    path = tmp_path / "model.tflite"
    path.write_bytes(b"TFL3")
    return path
