"""
Pre-OCR: image preprocessing and best-of-N recognition.
"""

from .pipeline import ImagePreprocessingPipeline
from .s2_variants import PREPROCESSING_VARIANTS, PreprocessingVariant
from .s3_selector import QualityScorer

__all__ = [
    "ImagePreprocessingPipeline",
    "PreprocessingVariant",
    "PREPROCESSING_VARIANTS",
    "QualityScorer",
]
