"""
OCR extraction method: document text -> parameters -> classification.

Classification rules:
- scanned document: stripped text shorter than MIN_USABLE_TEXT_LENGTH
- the parser only sees non-scanned text
- success: at least one parameter, or a scanned document (manual entry is
  then the expected outcome, not a failure)
"""

import time
from typing import Optional

from loguru import logger

from config.settings import MIN_USABLE_TEXT_LENGTH, NO_TEXT_SENTINEL
from contracts.extraction_result_dto import RawDocument
from medextract.domain.contracts import OCRExtractionOutcome
from ..domain.exceptions import (
    ExtractionCancelledError,
    ExtractionTimeoutError,
    OCRProcessingError,
)
from ..domain.interfaces import IParameterParser
from ..infrastructure.execution import ExtractionContext
from .document_text_extractor import DocumentTextExtractor

COMPONENT = "OcrExtractionMethod"


def is_scanned_text(text: str) -> bool:
    return len((text or "").strip()) < MIN_USABLE_TEXT_LENGTH


class OcrExtractionMethod:
    """Traditional extraction: OCR pipeline + text-pattern parser."""

    def __init__(self, text_extractor: DocumentTextExtractor, parser: IParameterParser):
        self.text_extractor = text_extractor
        self.parser = parser

    def extract(self, document: RawDocument, context: Optional[ExtractionContext] = None) -> OCRExtractionOutcome:
        """
        Runs the OCR method.

        Returns:
            OCRExtractionOutcome; ``success=False`` when the engine is unreachable
            or a readable document yielded no parameters

        Raises:
            ExtractionCancelledError, ExtractionTimeoutError
        """
        context = context or ExtractionContext.create()
        start = time.perf_counter()

        try:
            text = self.text_extractor.extract_text(document, context)
        except (ExtractionCancelledError, ExtractionTimeoutError):
            raise
        except OCRProcessingError as e:
            logger.error(f"[{COMPONENT}] OCR failed: {e}")
            return OCRExtractionOutcome(success=False, extracted_text=NO_TEXT_SENTINEL, is_scanned_document=True, error=str(e))

        scanned = is_scanned_text(text)
        if scanned:
            logger.warning(f"[{COMPONENT}] No usable text, document treated as scanned")
            parameters = []
        else:
            parameters = self.parser.extract(text)

        success = len(parameters) > 0 or scanned
        error = None if success else "No health parameters found in recognised text"
        logger.info(
            f"[{COMPONENT}] {len(parameters)} parameters, scanned={scanned}, success={success} "
            f"({(time.perf_counter() - start) * 1000:.0f}ms)"
        )
        return OCRExtractionOutcome(
            success=success,
            extracted_text=text if not scanned else NO_TEXT_SENTINEL,
            health_parameters=tuple(parameters),
            is_scanned_document=scanned,
            error=error,
        )
