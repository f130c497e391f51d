import numpy as np
import pytest

from medextract.extraction.pre_ocr.infrastructure.filters import (
    apply_clahe,
    apply_gamma,
    apply_grayscale,
    apply_linear,
    apply_normalize,
    apply_resize_to_fit,
    apply_rotation,
    apply_threshold,
    apply_unsharp_mask,
)


@pytest.fixture
def gradient():
    """Grayscale 100x200 horizontal gradient 50..150."""
    row = np.linspace(50, 150, 200).astype(np.uint8)
    return np.tile(row, (100, 1))


def test_grayscale_converts_bgr():
    bgr = np.zeros((10, 20, 3), dtype=np.uint8)
    bgr[:, :, 2] = 200

    result = apply_grayscale(bgr)

    assert result.shape == (10, 20)


def test_grayscale_passes_2d_unchanged(gradient):
    assert apply_grayscale(gradient) is gradient


def test_resize_downscales_longer_side(gradient):
    result = apply_resize_to_fit(gradient, max_side=100)
    assert result.shape == (50, 100)


def test_resize_does_not_upscale_by_default(gradient):
    assert apply_resize_to_fit(gradient, max_side=1000) is gradient


def test_resize_upscales_when_allowed(gradient):
    result = apply_resize_to_fit(gradient, max_side=400, allow_upscale=True)
    assert result.shape == (200, 400)


def test_normalize_stretches_to_full_range(gradient):
    result = apply_normalize(gradient)
    assert result.min() == 0
    assert result.max() == 255


def test_linear_saturates():
    image = np.full((4, 4), 200, dtype=np.uint8)
    assert apply_linear(image, alpha=2.0, beta=0).max() == 255


def test_threshold_is_binary(gradient):
    result = apply_threshold(gradient, threshold=100)

    assert set(np.unique(result)) <= {0, 255}
    # pixels >= threshold are white
    assert result[0, -1] == 255
    assert result[0, 0] == 0


def test_unsharp_mask_keeps_shape_and_dtype(gradient):
    result = apply_unsharp_mask(gradient, sigma=1.5)
    assert result.shape == gradient.shape
    assert result.dtype == np.uint8


def test_clahe_on_color_input_returns_grayscale():
    image = np.random.default_rng(0).integers(0, 255, (128, 256, 3), dtype=np.uint8)
    result = apply_clahe(image, clip_limit=3.0, tile_px=64)
    assert result.shape == (128, 256)


def test_gamma_above_one_brightens_midtones():
    image = np.full((4, 4), 100, dtype=np.uint8)
    assert apply_gamma(image, gamma=1.3)[0, 0] > 100


@pytest.mark.parametrize("rotation, expected_shape", [(0, (100, 200)), (90, (200, 100)), (180, (100, 200)), (270, (200, 100))])
def test_rotation_shapes(gradient, rotation, expected_shape):
    assert apply_rotation(gradient, rotation).shape == expected_shape


def test_rotation_90_is_clockwise():
    image = np.zeros((2, 3), dtype=np.uint8)
    image[0, 0] = 255  # top-left

    rotated = apply_rotation(image, 90)

    # top-left moves to top-right
    assert rotated[0, -1] == 255


def test_rotation_rejects_other_angles(gradient):
    with pytest.raises(ValueError):
        apply_rotation(gradient, 45)
