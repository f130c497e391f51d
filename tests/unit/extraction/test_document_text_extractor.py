from typing import List

import pytest

from contracts.extraction_result_dto import RawDocument
from medextract.extraction.application import DocumentTextExtractor
from medextract.extraction.domain.exceptions import DocumentParseError, OCRProcessingError
from medextract.extraction.domain.interfaces import IPdfRasterizer, IPdfTextReader
from tests.doubles import LAB_REPORT_TEXT, make_page

TEXT_LAYER = LAB_REPORT_TEXT * 2


class StubReader(IPdfTextReader):
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error

    def read_text(self, buffer: bytes) -> str:
        if self.error:
            raise self.error
        return self.text


class StubRasterizer(IPdfRasterizer):
    def __init__(self, pages=(), error=None):
        self.pages = list(pages)
        self.error = error
        self.call_count = 0

    def rasterize(self, buffer: bytes) -> List[bytes]:
        self.call_count += 1
        if self.error:
            raise self.error
        return self.pages


class StubPipeline:
    def __init__(self, texts=None, error=None):
        self.texts = list(texts or [])
        self.error = error
        self.images: List[bytes] = []

    def recognize(self, image_content, context=None):
        self.images.append(image_content)
        if self.error:
            raise self.error
        return self.texts.pop(0) if self.texts else " "


def pdf():
    return RawDocument(buffer=b"%PDF-1.7 ...", mime_type="application/pdf")


def test_pdf_text_layer_is_used_directly():
    pipeline, rasterizer = StubPipeline(), StubRasterizer()
    extractor = DocumentTextExtractor(pipeline, StubReader(TEXT_LAYER), rasterizer)

    assert extractor.extract_text(pdf()) == TEXT_LAYER
    assert rasterizer.call_count == 0
    assert pipeline.images == []


def test_scanned_pdf_pages_are_ocred_and_joined():
    pages = [b"page-1", b"page-2"]
    pipeline = StubPipeline(texts=["Glucose: 95 mg/dL", "Hemoglobin: 14 g/dL"])
    extractor = DocumentTextExtractor(pipeline, StubReader("  "), StubRasterizer(pages))

    text = extractor.extract_text(pdf())

    assert text == "Glucose: 95 mg/dL\n\nHemoglobin: 14 g/dL"
    assert pipeline.images == pages


def test_short_text_layer_counts_as_scanned():
    pipeline = StubPipeline(texts=["Cholesterol: 180 mg/dL"])
    extractor = DocumentTextExtractor(pipeline, StubReader("Page 1"), StubRasterizer([b"page"]))

    assert extractor.extract_text(pdf()) == "Cholesterol: 180 mg/dL"


def test_unreadable_text_layer_falls_back_to_rasterizing():
    pipeline = StubPipeline(texts=["Cholesterol: 180 mg/dL"])
    extractor = DocumentTextExtractor(
        pipeline, StubReader(error=DocumentParseError("broken xref")), StubRasterizer([b"page"])
    )

    assert extractor.extract_text(pdf()) == "Cholesterol: 180 mg/dL"


def test_rasterize_failure_yields_sentinel():
    extractor = DocumentTextExtractor(
        StubPipeline(), StubReader(""), StubRasterizer(error=DocumentParseError("poppler missing"))
    )
    assert extractor.extract_text(pdf()) == " "


def test_scanned_pdf_without_text_yields_sentinel():
    extractor = DocumentTextExtractor(StubPipeline(texts=[" ", " "]), StubReader(""), StubRasterizer([b"a", b"b"]))
    assert extractor.extract_text(pdf()) == " "


def test_image_goes_to_pipeline():
    page = make_page()
    pipeline = StubPipeline(texts=[LAB_REPORT_TEXT])
    extractor = DocumentTextExtractor(pipeline, StubReader(), StubRasterizer())

    text = extractor.extract_text(RawDocument(buffer=page, mime_type="image/png"))

    assert text == LAB_REPORT_TEXT
    assert pipeline.images == [page]


def test_undecodable_image_yields_sentinel():
    from medextract.extraction.pre_ocr import ImagePreprocessingPipeline, QualityScorer
    from tests.doubles import FakeOcrEngine

    engine = FakeOcrEngine(lambda image, options: LAB_REPORT_TEXT)
    extractor = DocumentTextExtractor(ImagePreprocessingPipeline(engine, QualityScorer()), StubReader(), StubRasterizer())

    text = extractor.extract_text(RawDocument(buffer=b"\x00\x01garbage", mime_type="image/jpeg"))

    assert text == " "
    assert engine.call_count == 0


def test_unreachable_engine_propagates():
    extractor = DocumentTextExtractor(
        StubPipeline(error=OCRProcessingError("engine down")), StubReader(), StubRasterizer()
    )

    with pytest.raises(OCRProcessingError):
        extractor.extract_text(RawDocument(buffer=make_page(), mime_type="image/png"))
