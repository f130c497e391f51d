from .stage import PreprocessingVariantRunner
from .variants import (
    ADAPTIVE_CLAHE,
    HIGH_CONTRAST_MEDICAL,
    PREPROCESSING_VARIANTS,
    PreprocessingVariant,
)

__all__ = [
    "PreprocessingVariantRunner",
    "PreprocessingVariant",
    "PREPROCESSING_VARIANTS",
    "HIGH_CONTRAST_MEDICAL",
    "ADAPTIVE_CLAHE",
]
