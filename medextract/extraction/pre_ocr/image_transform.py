"""
Image codec and transform runner for the pre-OCR pipeline.

Buffers travel between stages as encoded bytes; a transform decodes once,
applies its filter chain and re-encodes as lossless PNG.
"""

from typing import Callable, Sequence

import cv2
import numpy as np
import numpy.typing as npt
from loguru import logger

from ..domain.exceptions import ImageDecodingError, ImageProcessingError

ImageOp = Callable[[npt.NDArray[np.uint8]], npt.NDArray[np.uint8]]


class ImageCodec:
    """Decodes image bytes to numpy arrays and back."""

    @staticmethod
    def decode(image_content: bytes) -> npt.NDArray[np.uint8]:
        """
        Decodes PNG/JPEG bytes into a BGR array.

        Raises:
            ImageDecodingError: If the bytes are empty or not an image
        """
        if not image_content:
            raise ImageDecodingError("Empty image buffer", component="ImageCodec")

        nparr = np.frombuffer(image_content, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

        if image is None:
            raise ImageDecodingError(
                f"Failed to decode image ({len(image_content)} bytes)",
                component="ImageCodec"
            )
        return image  # type: ignore[return-value]

    @staticmethod
    def encode(image: npt.NDArray[np.uint8]) -> bytes:
        """
        Encodes an array (BGR or grayscale) as PNG bytes.

        Raises:
            ImageProcessingError: If encoding fails
        """
        success, buffer = cv2.imencode(".png", image, [cv2.IMWRITE_PNG_COMPRESSION, 6])
        if not success:
            raise ImageProcessingError("Failed to encode image to PNG", component="ImageCodec")
        return buffer.tobytes()


class ImageTransform:
    """Applies a chain of filters to an encoded image buffer."""

    @staticmethod
    def apply(image_content: bytes, ops: Sequence[ImageOp]) -> bytes:
        image = ImageCodec.decode(image_content)
        for op in ops:
            try:
                image = op(image)
            except cv2.error as e:
                raise ImageProcessingError(
                    f"Filter {getattr(op, '__name__', op)!r} failed",
                    component="ImageTransform",
                    original_error=e
                )
        encoded = ImageCodec.encode(image)
        logger.trace(f"[ImageTransform] {len(ops)} ops -> {image.shape}, {len(encoded)} bytes")
        return encoded
