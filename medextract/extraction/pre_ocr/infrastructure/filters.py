"""
Pre-OCR Infrastructure: image filters and operations.

Low-level utilities used to build preprocessing variants. Every function is
pure: it returns a new array and never touches its input.
"""

import cv2
import numpy as np
import numpy.typing as npt


def apply_grayscale(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Converts a BGR image to grayscale."""
    if len(image.shape) == 2:
        return image
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)  # type: ignore[return-value]


def apply_resize_to_fit(
    image: npt.NDArray[np.uint8],
    max_side: int,
    allow_upscale: bool = False
) -> npt.NDArray[np.uint8]:
    """
    Scales the image so that its longer side equals ``max_side``.

    Args:
        image: Source image
        max_side: Target length of the longer side (pixels)
        allow_upscale: Enlarge images smaller than ``max_side``
    """
    height, width = image.shape[:2]
    longer = max(height, width)
    if longer == 0 or (longer <= max_side and not allow_upscale):
        return image

    scale = max_side / float(longer)
    new_size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
    interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_CUBIC
    return cv2.resize(image, new_size, interpolation=interpolation)  # type: ignore[return-value]


def apply_normalize(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    """Stretches intensities to the full [0, 255] range."""
    return cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX)  # type: ignore[return-value]


def apply_linear(image: npt.NDArray[np.uint8], alpha: float, beta: float) -> npt.NDArray[np.uint8]:
    """Contrast/brightness: ``alpha * pixel + beta``, saturated to uint8."""
    return cv2.convertScaleAbs(image, alpha=alpha, beta=beta)  # type: ignore[return-value]


def apply_unsharp_mask(
    image: npt.NDArray[np.uint8],
    sigma: float = 1.0,
    amount: float = 1.0
) -> npt.NDArray[np.uint8]:
    """
    Unsharp mask sharpening.

    Args:
        image: Source image
        sigma: Gaussian blur sigma
        amount: Strength of the added detail
    """
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    return cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)  # type: ignore[return-value]


def apply_threshold(image: npt.NDArray[np.uint8], threshold: int) -> npt.NDArray[np.uint8]:
    """Binary threshold: pixels >= ``threshold`` become white, the rest black."""
    gray = apply_grayscale(image)
    _, binary = cv2.threshold(gray, threshold - 1, 255, cv2.THRESH_BINARY)
    return binary  # type: ignore[return-value]


def apply_clahe(
    image: npt.NDArray[np.uint8],
    clip_limit: float = 2.0,
    tile_px: int = 64
) -> npt.NDArray[np.uint8]:
    """
    CLAHE (Contrast Limited Adaptive Histogram Equalization).

    Args:
        image: Grayscale image (H, W)
        clip_limit: Contrast threshold
        tile_px: Approximate size of one local region in pixels
    """
    gray = apply_grayscale(image)
    height, width = gray.shape[:2]
    grid = (max(1, int(round(width / tile_px))), max(1, int(round(height / tile_px))))
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=grid)
    return clahe.apply(gray)  # type: ignore[return-value]


def apply_gamma(image: npt.NDArray[np.uint8], gamma: float) -> npt.NDArray[np.uint8]:
    """Gamma correction through a lookup table (gamma > 1 brightens midtones)."""
    inverse = 1.0 / gamma
    table = np.array(
        [((value / 255.0) ** inverse) * 255 for value in range(256)]
    ).clip(0, 255).astype(np.uint8)
    return cv2.LUT(image, table)  # type: ignore[return-value]


def apply_rotation(image: npt.NDArray[np.uint8], rotation: int) -> npt.NDArray[np.uint8]:
    """
    Rotates the image clockwise by 90, 180 or 270 degrees.

    Args:
        image: Source image
        rotation: 0, 90, 180 or 270

    Returns:
        Rotated image (the input itself for 0)
    """
    if rotation == 90:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)  # type: ignore[return-value]
    elif rotation == 180:
        return cv2.rotate(image, cv2.ROTATE_180)  # type: ignore[return-value]
    elif rotation == 270:
        return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)  # type: ignore[return-value]
    elif rotation == 0:
        return image
    raise ValueError(f"Rotation must be 0, 90, 180 or 270, got: {rotation}")
