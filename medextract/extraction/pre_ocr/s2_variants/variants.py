"""
Preprocessing variants for the heavy OCR ladder.

A variant is a named recipe: an ordered filter chain plus the engine
settings used on its output. The order of PREPROCESSING_VARIANTS is the
tie-break order of the selector.
"""

from dataclasses import dataclass, field
from functools import partial
from typing import Tuple

from config.settings import (
    CLAHE_CLIP_LIMIT,
    CLAHE_GAMMA,
    CLAHE_SHARPEN_SIGMA,
    CLAHE_TILE_PX,
    HIGH_CONTRAST_ALPHA,
    HIGH_CONTRAST_BETA,
    HIGH_CONTRAST_SHARPEN_SIGMA,
    HIGH_CONTRAST_THRESHOLD,
    VARIANT_CANVAS_SIZE,
)
from medextract.domain.contracts import EngineOptions
from ..engine_call import STRICT_ENGINE_OPTIONS
from ..image_transform import ImageOp, ImageTransform
from ..infrastructure.filters import (
    apply_clahe,
    apply_gamma,
    apply_grayscale,
    apply_linear,
    apply_normalize,
    apply_resize_to_fit,
    apply_threshold,
    apply_unsharp_mask,
)


@dataclass(frozen=True)
class PreprocessingVariant:
    name: str
    ops: Tuple[ImageOp, ...]
    engine_options: EngineOptions = field(default=STRICT_ENGINE_OPTIONS)

    def transform(self, image_content: bytes) -> bytes:
        return ImageTransform.apply(image_content, self.ops)


HIGH_CONTRAST_MEDICAL = PreprocessingVariant(
    name="high_contrast_medical",
    ops=(
        partial(apply_resize_to_fit, max_side=VARIANT_CANVAS_SIZE, allow_upscale=True),
        apply_grayscale,
        apply_normalize,
        partial(apply_linear, alpha=HIGH_CONTRAST_ALPHA, beta=HIGH_CONTRAST_BETA),
        partial(apply_unsharp_mask, sigma=HIGH_CONTRAST_SHARPEN_SIGMA),
        partial(apply_threshold, threshold=HIGH_CONTRAST_THRESHOLD),
    ),
)

ADAPTIVE_CLAHE = PreprocessingVariant(
    name="adaptive_clahe",
    ops=(
        partial(apply_resize_to_fit, max_side=VARIANT_CANVAS_SIZE, allow_upscale=True),
        apply_grayscale,
        partial(apply_clahe, clip_limit=CLAHE_CLIP_LIMIT, tile_px=CLAHE_TILE_PX),
        partial(apply_gamma, gamma=CLAHE_GAMMA),
        partial(apply_unsharp_mask, sigma=CLAHE_SHARPEN_SIGMA),
    ),
)

PREPROCESSING_VARIANTS: Tuple[PreprocessingVariant, ...] = (
    HIGH_CONTRAST_MEDICAL,
    ADAPTIVE_CLAHE,
)
