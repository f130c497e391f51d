import pytest

from medextract.extraction.application import ExtractionComponentFactory, ExtractionOrchestrator
from medextract.extraction.application import factory as factory_module
from medextract.extraction.domain.exceptions import ExtractionConfigurationError
from medextract.extraction.infrastructure.adapters import TesseractOCREngine
from medextract.parsing import LabValueParser
from tests.doubles import FakeAIExtractor, FakeOcrEngine


def test_unknown_engine_rejected():
    with pytest.raises(ExtractionConfigurationError):
        ExtractionComponentFactory.create_ocr_engine("abbyy")


def test_tesseract_engine():
    assert isinstance(ExtractionComponentFactory.create_ocr_engine("tesseract"), TesseractOCREngine)


def test_default_parser():
    assert isinstance(ExtractionComponentFactory.create_parameter_parser(), LabValueParser)


def test_ai_extractor_without_key_is_unconfigured(monkeypatch):
    monkeypatch.setattr(factory_module, "GEMINI_API_KEY", None)
    assert not ExtractionComponentFactory.create_ai_extractor().is_configured


def test_orchestrator_with_overrides():
    ai = FakeAIExtractor(configured=True)
    orchestrator = ExtractionComponentFactory.create_orchestrator(
        engine=FakeOcrEngine(lambda image, options: ""), ai_extractor=ai
    )

    assert isinstance(orchestrator, ExtractionOrchestrator)
    assert orchestrator.ai_extractor is ai
    assert orchestrator.ai_available


def test_extraction_info():
    info = ExtractionComponentFactory.get_extraction_info()
    assert info["domain"] == "Extraction"
    assert info["components"]["parameter_parser"] == "LabValueParser"
