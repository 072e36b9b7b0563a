"""Tests for image decoding, orientation handling and normalization."""

import logging

import cv2
import numpy as np
import pytest
from PIL import Image

from cocoa_roast_scan.Drivers.image_normalizer import (
    Orientation,
    as_rgb_array,
    coerce_orientation,
    load_image,
    normalize_image,
    read_orientation,
    rotate_image,
)
from cocoa_roast_scan.exceptions import ImageDecodeError
from tests.utils.image_generation import encoded_image, random_image, uniform_image


def _resized(image: np.ndarray) -> np.ndarray:
    return cv2.resize(np.ascontiguousarray(image), (256, 256), interpolation=cv2.INTER_LINEAR)


@pytest.mark.parametrize(
    ("exif_value", "expected"),
    [
        (None, Orientation.NONE),
        (0, Orientation.NONE),
        (1, Orientation.NONE),
        (2, Orientation.NONE),  # mirrored
        (3, Orientation.ROTATE_180),
        (6, Orientation.ROTATE_90),
        (8, Orientation.ROTATE_270),
    ],
)
def test_orientation_from_exif(exif_value, expected) -> None:
    assert Orientation.from_exif(exif_value) is expected


def test_coerce_orientation_unknown_value_means_no_rotation() -> None:
    assert coerce_orientation(None) is Orientation.NONE
    assert coerce_orientation(6) is Orientation.ROTATE_90
    assert coerce_orientation("sideways") is Orientation.NONE


def test_normalize_rotate_180_matches_rotation_then_resize() -> None:
    image = random_image(53, 37, seed=1)

    result = normalize_image(image, Orientation.ROTATE_180)

    expected = _resized(image[::-1, ::-1])
    assert result.shape == (256, 256, 3)
    np.testing.assert_array_equal(result, expected)


@pytest.mark.parametrize("orientation", [None, Orientation.NONE])
def test_normalize_without_orientation_does_not_rotate(orientation) -> None:
    image = random_image(300, 200, seed=2)

    result = normalize_image(image, orientation)

    np.testing.assert_array_equal(result, _resized(image))


def test_rotate_90_is_clockwise() -> None:
    image = np.zeros((20, 40, 3), dtype=np.uint8)
    image[0, 0] = (255, 0, 0)  # top-left marker

    rotated = rotate_image(image, Orientation.ROTATE_90)

    assert rotated.shape == (40, 20, 3)
    # Clockwise: top-left moves to top-right
    assert tuple(rotated[0, 19]) == (255, 0, 0)


def test_rotate_270_is_counter_clockwise() -> None:
    image = np.zeros((20, 40, 3), dtype=np.uint8)
    image[0, 0] = (255, 0, 0)

    rotated = rotate_image(image, Orientation.ROTATE_270)

    assert rotated.shape == (40, 20, 3)
    # Counter-clockwise: top-left moves to bottom-left
    assert tuple(rotated[39, 0]) == (255, 0, 0)


def test_normalize_ignores_aspect_ratio() -> None:
    result = normalize_image(uniform_image(1000, 10))
    assert result.shape == (256, 256, 3)
    assert result.dtype == np.uint8


def test_normalize_exact_size_is_unchanged() -> None:
    image = random_image(256, 256, seed=3)
    np.testing.assert_array_equal(normalize_image(image), image)


def test_as_rgb_array_drops_alpha_and_expands_grayscale() -> None:
    rgba = np.zeros((4, 5, 4), dtype=np.uint8)
    rgba[..., 3] = 255
    assert as_rgb_array(rgba).shape == (4, 5, 3)

    gray = np.full((4, 5), 7, dtype=np.uint8)
    rgb = as_rgb_array(gray)
    assert rgb.shape == (4, 5, 3)
    assert np.all(rgb == 7)


def test_as_rgb_array_accepts_pil_image() -> None:
    img = Image.new("RGBA", (6, 3), color=(1, 2, 3, 0))
    arr = as_rgb_array(img)
    assert arr.shape == (3, 6, 3)
    assert tuple(arr[0, 0]) == (1, 2, 3)


@pytest.mark.parametrize(
    "bad",
    [None, np.zeros((0, 0, 3), dtype=np.uint8), np.zeros((4, 4, 2), dtype=np.uint8)],
)
def test_as_rgb_array_rejects_malformed_input(bad) -> None:
    with pytest.raises(ImageDecodeError):
        as_rgb_array(bad)


def test_load_image_reads_pixels_and_orientation() -> None:
    data = encoded_image(40, 20, orientation=6)

    image, orientation = load_image(data)

    assert image.shape == (20, 40, 3)
    assert image.dtype == np.uint8
    assert orientation is Orientation.ROTATE_90


def test_load_image_from_path(tmp_path) -> None:
    path = tmp_path / "bean.png"
    path.write_bytes(encoded_image(12, 8, fmt="PNG", color=(10, 20, 30)))

    image, orientation = load_image(str(path))

    assert image.shape == (8, 12, 3)
    assert tuple(image[0, 0]) == (10, 20, 30)
    assert orientation is Orientation.NONE


def test_load_image_failures_raise_decode_error(tmp_path) -> None:
    with pytest.raises(ImageDecodeError):
        load_image(None)
    with pytest.raises(ImageDecodeError):
        load_image(b"definitely not an image")
    with pytest.raises(ImageDecodeError):
        load_image(tmp_path / "missing.jpg")


def test_read_orientation_never_raises(tmp_path) -> None:
    assert read_orientation(b"garbage") is Orientation.NONE
    assert read_orientation(tmp_path / "missing.jpg") is Orientation.NONE
    assert read_orientation(encoded_image(8, 8)) is Orientation.NONE
    assert read_orientation(encoded_image(8, 8, orientation=3)) is Orientation.ROTATE_180


def test_read_orientation_survives_odd_exif_values() -> None:
    img = Image.new("RGB", (4, 4))
    img.getexif = lambda: {0x0112: [6]}

    assert read_orientation(img) is Orientation.NONE


def test_degrees_passed_as_int_are_warned_about(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="cocoa_roast_scan.Drivers.image_normalizer"):
        assert coerce_orientation(90) is Orientation.NONE

    assert any("not an EXIF orientation code" in r.getMessage() for r in caplog.records)


def test_valid_exif_codes_are_not_warned_about(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="cocoa_roast_scan.Drivers.image_normalizer"):
        assert coerce_orientation(1) is Orientation.NONE
        assert coerce_orientation(8) is Orientation.ROTATE_270

    assert not caplog.records


def test_normalize_reports_each_stage() -> None:
    seen = []
    image = random_image(30, 20, seed=4)

    result = normalize_image(image, Orientation.ROTATE_90, on_stage=lambda stage, arr: seen.append((stage, arr.shape)))

    assert seen == [
        ("original", (20, 30, 3)),
        ("rotated", (30, 20, 3)),
        ("preprocessed", (256, 256, 3)),
    ]
    assert result.shape == (256, 256, 3)


def test_normalize_skips_rotated_stage_without_orientation() -> None:
    seen = []
    normalize_image(random_image(30, 20), on_stage=lambda stage, arr: seen.append(stage))
    assert seen == ["original", "preprocessed"]
