"""
Factory for the components of the Extraction domain.

Builds the whole object graph from config.settings: OCR engine, image
pipeline, PDF access, parameter parser, Gemini client and orchestrator.
"""

from typing import Any, Dict, Optional

from loguru import logger

from config.settings import GEMINI_API_KEY, GEMINI_MODEL, OCR_ENGINE, OCR_MAX_WORKERS
from ..domain.exceptions import ExtractionConfigurationError
from ..domain.interfaces import IAIExtractor, IOCREngine, IParameterParser
from ..infrastructure.adapters import Pdf2ImageRasterizer, PdfPlumberTextReader, TesseractOCREngine
from ..pre_ocr.pipeline import ImagePreprocessingPipeline
from .document_text_extractor import DocumentTextExtractor
from .ocr_method import OcrExtractionMethod
from .orchestrator import ExtractionOrchestrator


class ExtractionComponentFactory:
    """
    Factory for the Extraction domain.

    Every create_* method accepts overrides so tests and callers can swap a
    single collaborator.
    """

    @staticmethod
    def create_ocr_engine(engine_name: Optional[str] = None) -> IOCREngine:
        """
        Args:
            engine_name: "tesseract" or "google_vision" (default: OCR_ENGINE)
        """
        engine_name = engine_name or OCR_ENGINE
        logger.debug(f"[Extraction] Creating OCR engine: {engine_name}")
        if engine_name == "tesseract":
            return TesseractOCREngine()
        if engine_name == "google_vision":
            from ..infrastructure.adapters.google_vision_adapter import GoogleVisionOCREngine
            return GoogleVisionOCREngine()
        raise ExtractionConfigurationError(f"Unknown OCR engine: {engine_name}", component="ExtractionComponentFactory")

    @staticmethod
    def create_image_pipeline(
        engine: Optional[IOCREngine] = None,
        max_workers: Optional[int] = None
    ) -> ImagePreprocessingPipeline:
        engine = engine or ExtractionComponentFactory.create_ocr_engine()
        return ImagePreprocessingPipeline(engine, max_workers=max_workers or OCR_MAX_WORKERS)

    @staticmethod
    def create_parameter_parser() -> IParameterParser:
        from medextract.parsing.lab_value_parser import LabValueParser
        return LabValueParser()

    @staticmethod
    def create_ai_extractor(api_key: Optional[str] = None, model_name: Optional[str] = None) -> IAIExtractor:
        """
        Gemini extractor; without an API key it is returned unconfigured and
        the orchestrator skips it.
        """
        from ..infrastructure.ai import GeminiClient, GeminiReportExtractor

        api_key = api_key or GEMINI_API_KEY
        if not api_key:
            logger.warning("[Extraction] GEMINI_API_KEY not set, AI extraction disabled")
            return GeminiReportExtractor(client=None)
        return GeminiReportExtractor(client=GeminiClient(api_key, model_name or GEMINI_MODEL))

    @staticmethod
    def create_orchestrator(
        engine: Optional[IOCREngine] = None,
        ai_extractor: Optional[IAIExtractor] = None,
        parser: Optional[IParameterParser] = None
    ) -> ExtractionOrchestrator:
        """
        Creates a fully configured orchestrator.

        Args:
            engine: OCR engine (default from settings)
            ai_extractor: AI extractor (default: Gemini from settings)
            parser: Parameter parser (default: LabValueParser)
        """
        logger.info("[Extraction] Creating extraction orchestrator")
        text_extractor = DocumentTextExtractor(
            image_pipeline=ExtractionComponentFactory.create_image_pipeline(engine),
            pdf_reader=PdfPlumberTextReader(),
            pdf_rasterizer=Pdf2ImageRasterizer(),
        )
        ocr_method = OcrExtractionMethod(
            text_extractor,
            parser or ExtractionComponentFactory.create_parameter_parser(),
        )
        return ExtractionOrchestrator(
            ocr_method=ocr_method,
            ai_extractor=ai_extractor or ExtractionComponentFactory.create_ai_extractor(),
        )

    @staticmethod
    def get_extraction_info() -> Dict[str, Any]:
        """Describes the configured components."""
        return {
            "domain": "Extraction",
            "responsibility": "Lab report -> health parameters (AI first, OCR fallback)",
            "components": {
                "ocr_engine": OCR_ENGINE,
                "ai_extractor": GEMINI_MODEL if GEMINI_API_KEY else None,
                "parameter_parser": "LabValueParser",
                "orchestrator": "ExtractionOrchestrator",
            },
            "max_workers": OCR_MAX_WORKERS,
        }
