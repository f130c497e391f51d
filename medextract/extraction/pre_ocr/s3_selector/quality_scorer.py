"""
Quality scorer for candidate OCR texts.

Composite heuristic, additive over five kinds of evidence:

    content     min(chars, 100) * 0.5
    structure   "label: number" / "label - number" matches * 8
    medical     distinct vocabulary keywords * 15
    units       number + unit matches * 12
    confidence  engine confidence (0-100) * 0.4

Pure function of (text, confidence): no I/O after construction.
"""

import re
from typing import Optional

from loguru import logger

from config.settings import (
    SCORE_CONFIDENCE_WEIGHT,
    SCORE_CONTENT_CHAR_CAP,
    SCORE_CONTENT_PER_CHAR,
    SCORE_MEDICAL_WEIGHT,
    SCORE_STRUCTURE_WEIGHT,
    SCORE_UNIT_WEIGHT,
)
from medextract.domain.contracts import QualityScore, ScoreBreakdown, TextMetrics
from medextract.domain.vocabulary import MedicalVocabulary

TABLE_PATTERN = re.compile(r"\w+\s*[:\-]\s*\d+")


class QualityScorer:
    """Scores how much a recognised text looks like a lab report."""

    def __init__(self, vocabulary: Optional[MedicalVocabulary] = None):
        self.vocabulary = vocabulary or MedicalVocabulary.load()

    def measure(self, text: str) -> TextMetrics:
        text = text or ""
        return TextMetrics(
            char_count=len(text),
            table_patterns=len(TABLE_PATTERN.findall(text)),
            medical_term_count=self.vocabulary.count_keywords(text),
            unit_patterns=len(self.vocabulary.unit_pattern.findall(text)),
        )

    def score(self, text: str, engine_confidence: float) -> QualityScore:
        """
        Scores one candidate.

        Args:
            text: Recognised text
            engine_confidence: Engine confidence [0-100]

        Returns:
            QualityScore with total, per-signal breakdown and raw metrics
        """
        return self.score_metrics(self.measure(text), engine_confidence)

    def score_metrics(self, metrics: TextMetrics, engine_confidence: float) -> QualityScore:
        confidence = min(max(float(engine_confidence or 0.0), 0.0), 100.0)
        breakdown = ScoreBreakdown(
            content=min(metrics.char_count, SCORE_CONTENT_CHAR_CAP) * SCORE_CONTENT_PER_CHAR,
            structure=metrics.table_patterns * SCORE_STRUCTURE_WEIGHT,
            medical_content=metrics.medical_term_count * SCORE_MEDICAL_WEIGHT,
            units=metrics.unit_patterns * SCORE_UNIT_WEIGHT,
            confidence=confidence * SCORE_CONFIDENCE_WEIGHT,
        )
        score = QualityScore(total=breakdown.total, breakdown=breakdown, metrics=metrics)
        logger.trace(
            f"[QualityScorer] total={score.total:.1f} "
            f"(chars={metrics.char_count}, table={metrics.table_patterns}, "
            f"terms={metrics.medical_term_count}, units={metrics.unit_patterns}, conf={confidence:.0f})"
        )
        return score
