"""
Application layer of the Extraction domain.

Orchestrator, OCR method, document routing and the component factory.
"""

from .document_text_extractor import DocumentTextExtractor
from .factory import ExtractionComponentFactory
from .insights import generate_basic_insights
from .ocr_method import OcrExtractionMethod
from .orchestrator import ExtractionOrchestrator, ExtractionState
from .result_validation import ValidationReport, extraction_stats, validate_extraction_result

__all__ = [
    "DocumentTextExtractor",
    "ExtractionComponentFactory",
    "ExtractionOrchestrator",
    "ExtractionState",
    "OcrExtractionMethod",
    "ValidationReport",
    "extraction_stats",
    "generate_basic_insights",
    "validate_extraction_result",
]
