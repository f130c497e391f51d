"""Pre-OCR Infrastructure exports."""

from .filters import (
    apply_grayscale,
    apply_resize_to_fit,
    apply_normalize,
    apply_linear,
    apply_unsharp_mask,
    apply_threshold,
    apply_clahe,
    apply_gamma,
    apply_rotation,
)

__all__ = [
    'apply_grayscale',
    'apply_resize_to_fit',
    'apply_normalize',
    'apply_linear',
    'apply_unsharp_mask',
    'apply_threshold',
    'apply_clahe',
    'apply_gamma',
    'apply_rotation',
]
