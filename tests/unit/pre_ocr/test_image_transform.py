from functools import partial

import cv2
import numpy as np
import pytest

from medextract.extraction.domain.exceptions import ImageDecodingError, ImageProcessingError
from medextract.extraction.pre_ocr.image_transform import ImageCodec, ImageTransform
from medextract.extraction.pre_ocr.infrastructure.filters import apply_grayscale, apply_rotation
from tests.doubles import make_page


def test_decode_empty_buffer_raises():
    with pytest.raises(ImageDecodingError):
        ImageCodec.decode(b"")


def test_decode_garbage_raises():
    with pytest.raises(ImageDecodingError):
        ImageCodec.decode(b"%PDF-1.4 definitely not an image")


def test_decode_returns_bgr_array():
    image = ImageCodec.decode(make_page(height=30, width=20))
    assert image.shape == (30, 20, 3)


def test_encode_produces_png():
    encoded = ImageCodec.encode(np.zeros((5, 5), dtype=np.uint8))
    assert encoded.startswith(b"\x89PNG")


def test_transform_applies_ops_in_order():
    page = make_page(height=30, width=20)

    result = ImageTransform.apply(page, [apply_grayscale, partial(apply_rotation, rotation=90)])

    decoded = cv2.imdecode(np.frombuffer(result, np.uint8), cv2.IMREAD_UNCHANGED)
    assert decoded.shape == (20, 30)


def test_transform_does_not_modify_input():
    page = make_page(marker="top_left")
    before = bytes(page)

    ImageTransform.apply(page, [partial(apply_rotation, rotation=180)])

    assert page == before


def test_transform_wraps_opencv_errors():
    def broken(image):
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)  # input is already BGR

    with pytest.raises(ImageProcessingError):
        ImageTransform.apply(make_page(), [broken])
