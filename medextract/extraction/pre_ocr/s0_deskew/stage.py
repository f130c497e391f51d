"""
Stage 0: Deskew (rotation detection).

Only axis-aligned orientation is corrected:
1. Fast OCR on the unmodified buffer
2. If fewer than DESKEW_MIN_TEXT_LENGTH characters come back, OCR the
   90/180/270 degree clockwise rotations concurrently
3. The rotation with the most text wins, but only if it is strictly longer
   than the best so far (probes compared in 90, 180, 270 order)

Any failure here keeps the original buffer. Cancellation and deadline
errors still propagate.
"""

from functools import partial
from typing import Dict, Optional, Sequence, Tuple

from loguru import logger

from config.settings import DESKEW_MIN_TEXT_LENGTH, DESKEW_ROTATIONS, OCR_LOCALE
from medextract.domain.contracts import DeskewResult, OCROutput
from ...domain.exceptions import (
    ExtractionCancelledError,
    ExtractionTimeoutError,
)
from ...domain.interfaces import IOCREngine
from ...infrastructure.execution import ExtractionContext, fan_out
from ..engine_call import FAST_ENGINE_OPTIONS, run_ocr
from ..image_transform import ImageTransform
from ..infrastructure.filters import apply_rotation

COMPONENT = "Stage 0: Deskew"


class DeskewDetectorStage:
    """Stage 0: picks the page orientation that yields the most text."""

    def __init__(
        self,
        engine: IOCREngine,
        locale: str = OCR_LOCALE,
        min_text_length: int = DESKEW_MIN_TEXT_LENGTH,
        rotations: Sequence[int] = DESKEW_ROTATIONS,
        max_workers: Optional[int] = None
    ):
        self.engine = engine
        self.locale = locale
        self.min_text_length = min_text_length
        self.rotations = tuple(rotations)
        self.max_workers = max_workers
        logger.debug(f"[{COMPONENT}] Initialized (threshold={min_text_length}, rotations={self.rotations})")

    def detect(self, image_content: bytes, context: ExtractionContext) -> DeskewResult:
        """
        Returns the (possibly rotated) buffer and the chosen rotation.

        Args:
            image_content: Encoded image
            context: Request deadline and cancellation

        Returns:
            DeskewResult; ``image_bytes`` is the input itself for rotation 0
        """
        context.check(COMPONENT)
        try:
            initial = self._recognize(image_content, context)
        except (ExtractionCancelledError, ExtractionTimeoutError):
            raise
        except Exception as e:
            logger.warning(f"[{COMPONENT}] Probe OCR failed, keeping orientation: {type(e).__name__}: {e}")
            return DeskewResult(image_bytes=image_content, rotation=0)

        best_length = len(initial.text.strip())
        probe_lengths: Dict[int, int] = {0: best_length}
        if best_length >= self.min_text_length:
            logger.debug(f"[{COMPONENT}] {best_length} chars upright, no rotation probe")
            return DeskewResult(image_bytes=image_content, rotation=0, probe_lengths=probe_lengths)

        logger.info(
            f"[{COMPONENT}] Only {best_length} chars upright, probing rotations {self.rotations}"
        )
        branches = [partial(self._probe, image_content, rotation, context) for rotation in self.rotations]
        outcomes = fan_out(branches, context=context, component=COMPONENT, max_workers=self.max_workers)

        best_rotation = 0
        best_bytes = image_content
        for rotation, outcome in zip(self.rotations, outcomes):
            if not outcome.ok:
                logger.warning(f"[{COMPONENT}] Rotation {rotation} probe failed: {outcome.error}")
                continue
            rotated_bytes, output = outcome.value
            length = len(output.text.strip())
            probe_lengths[rotation] = length
            if length > best_length:
                best_length, best_rotation, best_bytes = length, rotation, rotated_bytes

        if best_rotation:
            logger.info(f"[{COMPONENT}] Rotated {best_rotation} degrees ({best_length} chars)")
        else:
            logger.debug(f"[{COMPONENT}] No rotation improved the text yield")
        return DeskewResult(image_bytes=best_bytes, rotation=best_rotation, probe_lengths=probe_lengths)

    def _probe(self, image_content: bytes, rotation: int, context: ExtractionContext) -> Tuple[bytes, OCROutput]:
        rotated = ImageTransform.apply(image_content, [partial(apply_rotation, rotation=rotation)])
        return rotated, self._recognize(rotated, context)

    def _recognize(self, image_content: bytes, context: ExtractionContext) -> OCROutput:
        return run_ocr(
            self.engine,
            image_content,
            locale=self.locale,
            options=FAST_ENGINE_OPTIONS,
            context=context,
            component=COMPONENT,
        )
