"""
Tests for ImagePreprocessingPipeline (stages 0-3 wired together).

The fake engine answers by page segmentation mode, so every variant can be
given its own text.
"""

import pytest

from medextract.domain.contracts import EngineOptions
from medextract.extraction.domain.exceptions import ImageDecodingError, OCRProcessingError, OCRProviderError
from medextract.extraction.pre_ocr import ImagePreprocessingPipeline, PreprocessingVariant, QualityScorer
from tests.doubles import LAB_REPORT_TEXT, PLAIN_TEXT, FakeOcrEngine, make_page, marker_is_top_left

FAST_PSM = 3

SPARSE = PreprocessingVariant(name="sparse", ops=(), engine_options=EngineOptions(psm=4))
DENSE = PreprocessingVariant(name="dense", ops=(), engine_options=EngineOptions(psm=11))


def by_psm(texts):
    def respond(image, options):
        text = texts[options.psm]
        if isinstance(text, Exception):
            raise text
        return text
    return respond


@pytest.fixture
def scorer(vocabulary):
    return QualityScorer(vocabulary)


def test_quick_scan_shortcut_skips_variants(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: LAB_REPORT_TEXT, 4: "unused", 11: "unused"}))
    pipeline = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE])

    report = pipeline.recognize_detailed(make_page())

    assert report.accepted_by_quick_scan
    assert report.text == LAB_REPORT_TEXT
    assert report.candidates == ()
    assert engine.calls_with_psm(4) == engine.calls_with_psm(11) == 0


def test_best_variant_wins(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: PLAIN_TEXT, 4: "Glucose: 95 mg/dL", 11: LAB_REPORT_TEXT}))
    pipeline = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE])

    report = pipeline.recognize_detailed(make_page())

    assert not report.accepted_by_quick_scan
    assert report.selected_variant == "dense"
    assert report.text == LAB_REPORT_TEXT
    assert [c.variant for c in report.candidates] == ["sparse", "dense"]


def test_selection_is_deterministic(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: PLAIN_TEXT, 4: "Glucose: 95 mg/dL", 11: LAB_REPORT_TEXT}))
    pipeline = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE], max_workers=2)

    results = {pipeline.recognize(make_page()) for _ in range(5)}

    assert results == {LAB_REPORT_TEXT}


def test_tie_goes_to_first_variant(scorer):
    same = "Cholesterol: 180 mg/dL"
    engine = FakeOcrEngine(by_psm({FAST_PSM: PLAIN_TEXT, 4: same, 11: same}))

    report = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE]).recognize_detailed(make_page())

    assert report.selected_variant == "sparse"


def test_failed_variant_never_beats_scored_one(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: PLAIN_TEXT, 4: OCRProviderError("boom"), 11: "Hb: 9.1 g/dL low"}))

    report = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE]).recognize_detailed(make_page())

    assert report.candidates[0].failed
    assert report.selected_variant == "dense"


def test_too_little_text_yields_sentinel(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: "", 4: "Hb 9", 11: ""}))

    text = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE]).recognize(make_page())

    assert text == " "


def test_every_pass_failing_raises(scorer):
    def down(image, options):
        raise OCRProviderError("engine unreachable")

    pipeline = ImagePreprocessingPipeline(FakeOcrEngine(down), scorer, variants=[SPARSE, DENSE])

    with pytest.raises(OCRProcessingError):
        pipeline.recognize(make_page())


def test_variants_failing_after_usable_quick_scan_do_not_raise(scorer):
    engine = FakeOcrEngine(by_psm({FAST_PSM: PLAIN_TEXT, 4: OCRProviderError("x"), 11: OCRProviderError("y")}))

    text = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE]).recognize(make_page())

    assert text == " "


def test_undecodable_buffer_raises_decoding_error(scorer):
    engine = FakeOcrEngine(lambda image, options: LAB_REPORT_TEXT)

    with pytest.raises(ImageDecodingError):
        ImagePreprocessingPipeline(engine, scorer).recognize(b"not an image")

    assert engine.call_count == 0


def test_upside_down_page_is_corrected_before_quick_scan(scorer):
    def respond(image, options):
        return LAB_REPORT_TEXT if marker_is_top_left(image) else ""

    engine = FakeOcrEngine(respond)
    report = ImagePreprocessingPipeline(engine, scorer, variants=[SPARSE, DENSE]).recognize_detailed(
        make_page(marker="bottom_right")
    )

    assert report.rotation == 180
    assert report.accepted_by_quick_scan
    assert report.text == LAB_REPORT_TEXT
    # upright probe + three rotations + quick scan
    assert engine.call_count == 5
