"""
Image preprocessing pipeline (cheap first, expensive later).

Stages:
0. Deskew: fast OCR, rotation probes if the page reads badly
1. Quick scan: one downscaled pass; a convincing result ends the pipeline
2. Variants: N preprocessing recipes OCR'd concurrently
3. Selector: best-of-N by quality score, sentinel if nothing usable

The engine is considered unreachable only when the quick scan and every
variant failed; then OCRProcessingError is raised. Anything less degrades
to the sentinel text.
"""

from typing import Optional, Sequence

from loguru import logger

from config.settings import OCR_LOCALE
from medextract.domain.contracts import RecognitionReport
from ..domain.exceptions import OCRProcessingError
from ..domain.interfaces import IOCREngine
from ..infrastructure.execution import ExtractionContext
from .image_transform import ImageCodec
from .s0_deskew import DeskewDetectorStage
from .s1_quick_scan import QuickScanStage
from .s2_variants import PREPROCESSING_VARIANTS, PreprocessingVariant, PreprocessingVariantRunner
from .s3_selector import CandidateSelectorStage, QualityScorer

COMPONENT = "ImagePreprocessingPipeline"


class ImagePreprocessingPipeline:
    """
    Deskew -> quick scan -> variant ladder -> best-of-N.

    Stateless between calls: every call gets its own context and buffers.
    """

    def __init__(
        self,
        engine: IOCREngine,
        scorer: Optional[QualityScorer] = None,
        variants: Sequence[PreprocessingVariant] = PREPROCESSING_VARIANTS,
        locale: str = OCR_LOCALE,
        max_workers: Optional[int] = None
    ):
        self.engine = engine
        self.scorer = scorer or QualityScorer()
        self.variants = tuple(variants)
        self.deskew = DeskewDetectorStage(engine, locale=locale, max_workers=max_workers)
        self.quick_scan = QuickScanStage(engine, self.scorer, locale=locale)
        self.runner = PreprocessingVariantRunner(engine, self.scorer, locale=locale, max_workers=max_workers)
        self.selector = CandidateSelectorStage()
        logger.info(
            f"[{COMPONENT}] Initialized (engine={getattr(engine, 'name', type(engine).__name__)}, "
            f"variants={[v.name for v in self.variants]})"
        )

    def recognize(self, image_content: bytes, context: Optional[ExtractionContext] = None) -> str:
        """
        Recognizes text on one image.

        Returns:
            Best text, or the sentinel " " when nothing usable was found

        Raises:
            ImageDecodingError: buffer is not an image
            OCRProcessingError: engine unreachable (every pass failed)
            ExtractionCancelledError, ExtractionTimeoutError
        """
        return self.recognize_detailed(image_content, context).text

    def recognize_detailed(
        self,
        image_content: bytes,
        context: Optional[ExtractionContext] = None
    ) -> RecognitionReport:
        """Same as recognize(), with the decisions taken along the way."""
        context = context or ExtractionContext.create()
        ImageCodec.decode(image_content)

        # Stage 0
        logger.debug(f"[{COMPONENT}] Stage 0: Deskew")
        deskewed = self.deskew.detect(image_content, context)

        # Stage 1
        logger.debug(f"[{COMPONENT}] Stage 1: Quick scan")
        quick = self.quick_scan.scan(deskewed.image_bytes, context)
        if self.quick_scan.is_acceptable(quick):
            logger.info(
                f"[{COMPONENT}] Quick scan accepted (score {quick.quality_score:.1f}, "
                f"{quick.quality.metrics.medical_term_count} keywords)"
            )
            return RecognitionReport(
                text=self.selector.usable_text(quick),
                rotation=deskewed.rotation,
                accepted_by_quick_scan=True,
                quick_scan=quick,
                selected_variant=quick.variant,
            )

        # Stage 2
        logger.debug(f"[{COMPONENT}] Stage 2: Variants")
        candidates = self.runner.run_all(self.variants, deskewed.image_bytes, context)

        if quick.failed and all(candidate.failed for candidate in candidates):
            errors = "; ".join(f"{c.variant}: {c.error}" for c in (quick, *candidates))
            logger.error(f"[{COMPONENT}] Every OCR pass failed: {errors}")
            raise OCRProcessingError(f"OCR engine unreachable, every pass failed ({errors})", component=COMPONENT)

        # Stage 3
        best = self.selector.select(candidates)
        text = self.selector.usable_text(best)
        if not text.strip():
            logger.warning(f"[{COMPONENT}] No usable text found")

        return RecognitionReport(
            text=text,
            rotation=deskewed.rotation,
            quick_scan=quick,
            candidates=tuple(candidates),
            selected_variant=best.variant if best else None,
        )
