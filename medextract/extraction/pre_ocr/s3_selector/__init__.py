from .quality_scorer import QualityScorer
from .stage import CandidateSelectorStage

__all__ = ["QualityScorer", "CandidateSelectorStage"]
