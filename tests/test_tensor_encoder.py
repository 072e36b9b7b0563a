"""Tests for the tensor encoder."""

import numpy as np
import pytest

from cocoa_roast_scan.config import TENSOR_LENGTH, InputScale
from cocoa_roast_scan.Drivers.tensor_encoder import encode_image, to_model_input
from cocoa_roast_scan.exceptions import TensorEncodingError
from tests.utils.image_generation import uniform_image


def test_uniform_image_cycles_raw_channel_values() -> None:
    tensor = encode_image(uniform_image(256, 256, color=(10, 20, 30)))

    assert tensor.dtype == np.float32
    assert tensor.shape == (196608,)
    assert TENSOR_LENGTH == 196608
    np.testing.assert_array_equal(tensor, np.tile(np.array([10, 20, 30], dtype=np.float32), 256 * 256))


def test_layout_is_row_major_channel_interleaved() -> None:
    image = np.zeros((256, 256, 3), dtype=np.uint8)
    rows, cols = np.indices((256, 256))
    image[..., 0] = rows
    image[..., 1] = cols
    image[..., 2] = 7

    tensor = encode_image(image)

    for row, col in [(0, 0), (0, 255), (1, 0), (100, 37), (255, 255)]:
        offset = (row * 256 + col) * 3
        assert tensor[offset] == row
        assert tensor[offset + 1] == col
        assert tensor[offset + 2] == 7


def test_unit_scale_divides_by_255() -> None:
    tensor = encode_image(uniform_image(256, 256, color=(255, 0, 51)), InputScale.UNIT)

    np.testing.assert_allclose(tensor[:3], [1.0, 0.0, 0.2], rtol=1e-6)
    assert tensor.max() <= 1.0


def test_encoded_tensor_is_read_only() -> None:
    tensor = encode_image(uniform_image(256, 256))
    with pytest.raises(ValueError):
        tensor[0] = 1.0


def test_encoder_does_not_alias_source_image() -> None:
    image = uniform_image(256, 256, color=(1, 2, 3))
    tensor = encode_image(image)
    image[...] = 0
    assert tensor[:3].tolist() == [1.0, 2.0, 3.0]


@pytest.mark.parametrize("shape", [(255, 256, 3), (256, 256, 4), (256, 256)])
def test_wrong_shape_is_rejected(shape) -> None:
    with pytest.raises(TensorEncodingError):
        encode_image(np.zeros(shape, dtype=np.uint8))


def test_model_input_is_an_independent_writable_copy() -> None:
    tensor = encode_image(uniform_image(256, 256, color=(5, 5, 5)))

    model_input = to_model_input(tensor)
    model_input[...] = -1.0

    assert model_input.shape == (1, 256, 256, 3)
    assert model_input.dtype == np.float32
    assert np.all(tensor == 5.0)


def test_model_input_rejects_wrong_length() -> None:
    with pytest.raises(TensorEncodingError):
        to_model_input(np.zeros(10, dtype=np.float32))
