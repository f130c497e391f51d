"""
Interfaces (abstract classes) of the Extraction domain.

The Extraction domain consumes four external capabilities:
1. AI vision extractor (buffer -> parameters + insights)
2. Parameter parser (raw text -> parameters)
3. OCR engine (image -> text + confidence)
4. PDF access (text layer, page rasterization)
"""

from abc import ABC, abstractmethod
from typing import List

from contracts.extraction_result_dto import HealthParameter
from medextract.domain.contracts import AIExtractionOutcome, EngineOptions, OCROutput


class IOCREngine(ABC):
    """Single-page text recognition."""

    name: str = "ocr"

    @abstractmethod
    def recognize(
        self,
        image_content: bytes,
        locale: str,
        options: EngineOptions,
        timeout: float
    ) -> OCROutput:
        """
        Recognizes text on one image.

        Args:
            image_content: Encoded image bytes (PNG/JPEG)
            locale: Recognition locale (e.g. "eng")
            options: Engine settings for this call
            timeout: Seconds before the call is abandoned

        Returns:
            OCROutput with text and confidence [0-100]

        Raises:
            OCRProviderError: engine missing or misconfigured
            OCRTimeoutError: call exceeded ``timeout``
            OCRResponseError: engine failed on this image
        """
        pass


class IAIExtractor(ABC):
    """Opaque vision-language extraction of a whole document."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the extractor has credentials and can be called."""
        pass

    @abstractmethod
    def extract(self, buffer: bytes, mime_type: str, timeout: float) -> AIExtractionOutcome:
        """
        Extracts parameters, insights and patient info from a document.

        Raises:
            AIExtractionError: on any provider or response failure
        """
        pass


class IParameterParser(ABC):
    """Pure function of text: raw recognised text -> structured parameters."""

    @abstractmethod
    def extract(self, text: str) -> List[HealthParameter]:
        pass


class IPdfTextReader(ABC):
    """Reads the embedded text layer of a PDF."""

    @abstractmethod
    def read_text(self, buffer: bytes) -> str:
        """
        Raises:
            DocumentParseError: if the PDF cannot be parsed
        """
        pass


class IPdfRasterizer(ABC):
    """Renders PDF pages to images for OCR."""

    @abstractmethod
    def rasterize(self, buffer: bytes) -> List[bytes]:
        """
        Returns:
            One PNG buffer per rendered page

        Raises:
            DocumentParseError: if the PDF cannot be rendered
        """
        pass
