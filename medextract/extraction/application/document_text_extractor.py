"""
Document text extraction: PDF text layer or OCR.

- PDF with a usable text layer (> PDF_TEXT_LAYER_MIN_LENGTH chars): returned as is
- PDF without one (scanned) or with an unreadable text layer: pages are
  rasterized and each page goes through the image pipeline
- Image: straight to the image pipeline

Never hands a raw PDF to an image OCR engine. Unusable input degrades to
the no-text sentinel; only an unreachable OCR engine raises.
"""

from typing import List, Optional

from loguru import logger

from config.settings import NO_TEXT_SENTINEL, PDF_TEXT_LAYER_MIN_LENGTH
from contracts.extraction_result_dto import RawDocument
from ..domain.exceptions import DocumentParseError, ImageDecodingError
from ..domain.interfaces import IPdfRasterizer, IPdfTextReader
from ..infrastructure.execution import ExtractionContext
from ..pre_ocr.pipeline import ImagePreprocessingPipeline

COMPONENT = "DocumentTextExtractor"


class DocumentTextExtractor:
    """Routes a document to the text layer or to OCR."""

    def __init__(
        self,
        image_pipeline: ImagePreprocessingPipeline,
        pdf_reader: IPdfTextReader,
        pdf_rasterizer: IPdfRasterizer
    ):
        self.image_pipeline = image_pipeline
        self.pdf_reader = pdf_reader
        self.pdf_rasterizer = pdf_rasterizer

    def extract_text(self, document: RawDocument, context: Optional[ExtractionContext] = None) -> str:
        """
        Returns the document text, or " " when nothing usable was found.

        Raises:
            OCRProcessingError: OCR engine unreachable
            ExtractionCancelledError, ExtractionTimeoutError
        """
        context = context or ExtractionContext.create()
        context.check(COMPONENT)

        if document.is_pdf:
            return self._extract_pdf(document.buffer, context)
        return self._recognize_image(document.buffer, context)

    def _extract_pdf(self, buffer: bytes, context: ExtractionContext) -> str:
        try:
            text = self.pdf_reader.read_text(buffer)
        except DocumentParseError as e:
            logger.warning(f"[{COMPONENT}] PDF text layer unreadable, falling back to OCR: {e}")
            text = ""

        if len(text.strip()) > PDF_TEXT_LAYER_MIN_LENGTH:
            logger.info(f"[{COMPONENT}] Using PDF text layer ({len(text.strip())} chars)")
            return text

        logger.info(f"[{COMPONENT}] Scanned PDF ({len(text.strip())} chars in text layer), rasterizing")
        try:
            pages = self.pdf_rasterizer.rasterize(buffer)
        except DocumentParseError as e:
            logger.error(f"[{COMPONENT}] Rasterization failed, no text: {e}")
            return NO_TEXT_SENTINEL

        page_texts: List[str] = []
        for page_number, page in enumerate(pages, start=1):
            context.check(COMPONENT)
            page_text = self._recognize_image(page, context)
            logger.debug(f"[{COMPONENT}] Page {page_number}/{len(pages)}: {len(page_text.strip())} chars")
            if page_text.strip():
                page_texts.append(page_text.strip())

        return "\n\n".join(page_texts) if page_texts else NO_TEXT_SENTINEL

    def _recognize_image(self, buffer: bytes, context: ExtractionContext) -> str:
        try:
            return self.image_pipeline.recognize(buffer, context)
        except ImageDecodingError as e:
            logger.warning(f"[{COMPONENT}] Undecodable image, no text: {e}")
            return NO_TEXT_SENTINEL
