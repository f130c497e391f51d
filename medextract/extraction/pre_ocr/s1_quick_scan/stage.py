"""
Stage 1: Quick scan.

One cheap pass before the heavy ladder: downscale to QUICK_SCAN_MAX_SIZE,
grayscale, min-max normalise, OCR once. The result short-circuits the
pipeline when its score is above QUICK_SCAN_ACCEPT_SCORE and it contains
more than QUICK_SCAN_MIN_KEYWORDS distinct medical keywords.
"""

from functools import partial
from typing import Optional

from loguru import logger

from config.settings import (
    OCR_LOCALE,
    QUICK_SCAN_ACCEPT_SCORE,
    QUICK_SCAN_MAX_SIZE,
    QUICK_SCAN_MIN_KEYWORDS,
)
from medextract.domain.contracts import CandidateExtraction
from ...domain.exceptions import (
    ExtractionCancelledError,
    ExtractionError,
    ExtractionTimeoutError,
)
from ...domain.interfaces import IOCREngine
from ...infrastructure.execution import ExtractionContext
from ..engine_call import FAST_ENGINE_OPTIONS, run_ocr
from ..image_transform import ImageTransform
from ..infrastructure.filters import apply_grayscale, apply_normalize, apply_resize_to_fit
from ..s3_selector.quality_scorer import QualityScorer

COMPONENT = "Stage 1: Quick Scan"
QUICK_SCAN_VARIANT = "quick_scan"


class QuickScanStage:
    """Stage 1: fast single-pass OCR with an early-accept rule."""

    def __init__(
        self,
        engine: IOCREngine,
        scorer: QualityScorer,
        locale: str = OCR_LOCALE,
        max_size: int = QUICK_SCAN_MAX_SIZE
    ):
        self.engine = engine
        self.scorer = scorer
        self.locale = locale
        self.ops = (
            partial(apply_resize_to_fit, max_side=max_size),
            apply_grayscale,
            apply_normalize,
        )

    def scan(self, image_content: bytes, context: ExtractionContext) -> CandidateExtraction:
        """
        Runs the quick pass. Engine and transform errors are returned as a
        failed candidate; cancellation and deadline errors propagate.
        """
        context.check(COMPONENT)
        try:
            prepared = ImageTransform.apply(image_content, self.ops)
            output = run_ocr(
                self.engine,
                prepared,
                locale=self.locale,
                options=FAST_ENGINE_OPTIONS,
                context=context,
                component=COMPONENT,
            )
        except (ExtractionCancelledError, ExtractionTimeoutError):
            raise
        except ExtractionError as e:
            logger.warning(f"[{COMPONENT}] Failed: {e}")
            return CandidateExtraction(variant=QUICK_SCAN_VARIANT, error=str(e))
        except Exception as e:
            logger.error(f"[{COMPONENT}] Engine crashed: {type(e).__name__}: {e}")
            return CandidateExtraction(variant=QUICK_SCAN_VARIANT, error=f"{type(e).__name__}: {e}")

        quality = self.scorer.score(output.text, output.confidence)
        logger.debug(
            f"[{COMPONENT}] score={quality.total:.1f}, keywords={quality.metrics.medical_term_count}"
        )
        return CandidateExtraction(
            variant=QUICK_SCAN_VARIANT,
            text=output.text,
            engine_confidence=output.confidence,
            quality=quality,
        )

    @staticmethod
    def is_acceptable(candidate: Optional[CandidateExtraction]) -> bool:
        """True when the quick result is good enough to skip the ladder."""
        if candidate is None or candidate.failed:
            return False
        return (
            candidate.quality_score > QUICK_SCAN_ACCEPT_SCORE
            and candidate.quality.metrics.medical_term_count > QUICK_SCAN_MIN_KEYWORDS
        )
