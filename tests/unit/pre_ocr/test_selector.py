from medextract.domain.contracts import CandidateExtraction, QualityScore, ScoreBreakdown, TextMetrics
from medextract.extraction.pre_ocr.s3_selector import CandidateSelectorStage


def candidate(variant, score, text="Glucose: 95 mg/dL", error=None):
    if error:
        return CandidateExtraction(variant=variant, error=error)
    return CandidateExtraction(
        variant=variant,
        text=text,
        quality=QualityScore(total=score, breakdown=ScoreBreakdown(content=score), metrics=TextMetrics()),
    )


def test_highest_score_wins():
    best = CandidateSelectorStage().select([candidate("a", 10), candidate("b", 30), candidate("c", 20)])
    assert best.variant == "b"


def test_tie_goes_to_first_in_order():
    best = CandidateSelectorStage().select([candidate("a", 30), candidate("b", 30)])
    assert best.variant == "a"


def test_failed_candidate_loses_to_any_scored_one():
    best = CandidateSelectorStage().select([candidate("a", 0, error="boom"), candidate("b", 1)])
    assert best.variant == "b"


def test_empty_sequence_selects_nothing():
    assert CandidateSelectorStage().select([]) is None


def test_short_text_becomes_sentinel():
    assert CandidateSelectorStage.usable_text(candidate("a", 50, text="  Hb 9  ")) == " "


def test_missing_candidate_becomes_sentinel():
    assert CandidateSelectorStage.usable_text(None) == " "


def test_usable_text_is_returned_verbatim():
    text = "Hemoglobin: 14.2 g/dL"
    assert CandidateSelectorStage.usable_text(candidate("a", 50, text=text)) == text
