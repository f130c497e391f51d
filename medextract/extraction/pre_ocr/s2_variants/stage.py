"""
Stage 2: Variants (heavy preprocessing ladder).

Each PreprocessingVariant is applied to its own copy of the deskewed
buffer and OCR'd with strict engine settings. Variants run concurrently;
their order in the input sequence is preserved in the output.

A failing variant becomes a failed candidate with score 0, it never fails
the stage.
"""

from functools import partial
from typing import List, Optional, Sequence

from loguru import logger

from config.settings import OCR_LOCALE
from medextract.domain.contracts import CandidateExtraction
from ...domain.exceptions import (
    ExtractionCancelledError,
    ExtractionError,
    ExtractionTimeoutError,
)
from ...domain.interfaces import IOCREngine
from ...infrastructure.execution import ExtractionContext, fan_out
from ..engine_call import run_ocr
from ..s3_selector.quality_scorer import QualityScorer
from .variants import PreprocessingVariant

COMPONENT = "Stage 2: Variants"


class PreprocessingVariantRunner:
    """Stage 2: transform + OCR + score for each variant."""

    def __init__(
        self,
        engine: IOCREngine,
        scorer: QualityScorer,
        locale: str = OCR_LOCALE,
        max_workers: Optional[int] = None
    ):
        self.engine = engine
        self.scorer = scorer
        self.locale = locale
        self.max_workers = max_workers

    def run(
        self,
        variant: PreprocessingVariant,
        image_content: bytes,
        context: ExtractionContext
    ) -> CandidateExtraction:
        """
        Runs one variant.

        Returns:
            Scored candidate, or a failed candidate on engine/transform errors

        Raises:
            ExtractionCancelledError, ExtractionTimeoutError
        """
        context.check(COMPONENT)
        try:
            prepared = variant.transform(image_content)
            output = run_ocr(
                self.engine,
                prepared,
                locale=self.locale,
                options=variant.engine_options,
                context=context,
                component=f"{COMPONENT}/{variant.name}",
            )
        except (ExtractionCancelledError, ExtractionTimeoutError):
            raise
        except ExtractionError as e:
            logger.warning(f"[{COMPONENT}] Variant {variant.name} failed: {e}")
            return CandidateExtraction(variant=variant.name, error=str(e))

        quality = self.scorer.score(output.text, output.confidence)
        logger.debug(
            f"[{COMPONENT}] {variant.name}: {len(output.text)} chars, score={quality.total:.1f}"
        )
        return CandidateExtraction(
            variant=variant.name,
            text=output.text,
            engine_confidence=output.confidence,
            quality=quality,
        )

    def run_all(
        self,
        variants: Sequence[PreprocessingVariant],
        image_content: bytes,
        context: ExtractionContext
    ) -> List[CandidateExtraction]:
        """Runs all variants concurrently, results in variant order."""
        logger.info(f"[{COMPONENT}] Running {len(variants)} variants: {[v.name for v in variants]}")
        branches = [partial(self.run, variant, image_content, context) for variant in variants]
        outcomes = fan_out(branches, context=context, component=COMPONENT, max_workers=self.max_workers)

        candidates: List[CandidateExtraction] = []
        for variant, outcome in zip(variants, outcomes):
            if outcome.ok:
                candidates.append(outcome.value)
            else:
                logger.error(f"[{COMPONENT}] Variant {variant.name} crashed: {outcome.error!r}")
                candidates.append(CandidateExtraction(variant=variant.name, error=repr(outcome.error)))
        return candidates
