"""
Stage 3: Selector.

Best-of-N selection over scored candidates:
- highest total score wins
- ties go to the candidate that comes first in variant order
- a failed candidate scores 0 and can only win when nothing else scored
- a winner with fewer than MIN_USABLE_TEXT_LENGTH characters yields the
  no-text sentinel
"""

from typing import Optional, Sequence

from loguru import logger

from config.settings import MIN_USABLE_TEXT_LENGTH, NO_TEXT_SENTINEL
from medextract.domain.contracts import CandidateExtraction


class CandidateSelectorStage:
    """Stage 3: picks the final text among preprocessing candidates."""

    def select(self, candidates: Sequence[CandidateExtraction]) -> Optional[CandidateExtraction]:
        """
        Returns the best candidate, or None for an empty sequence.

        Deterministic: depends only on the scores and the sequence order.
        """
        best: Optional[CandidateExtraction] = None
        for candidate in candidates:
            # strict ">" keeps the earliest candidate on ties
            if best is None or candidate.quality_score > best.quality_score:
                best = candidate

        if best is not None:
            logger.info(
                f"[Stage 3: Selector] Best variant: {best.variant} "
                f"(score {best.quality_score:.1f}, {len(best.text)} chars)"
            )
            for candidate in candidates:
                status = f"failed: {candidate.error}" if candidate.failed else f"{candidate.quality_score:.1f}"
                logger.debug(f"[Stage 3: Selector]   {candidate.variant}: {status}")
        return best

    @staticmethod
    def usable_text(candidate: Optional[CandidateExtraction]) -> str:
        """Candidate text, or the sentinel when it is too short to be useful."""
        if candidate is None or len(candidate.text.strip()) < MIN_USABLE_TEXT_LENGTH:
            return NO_TEXT_SENTINEL
        return candidate.text
