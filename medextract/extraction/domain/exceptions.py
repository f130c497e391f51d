"""
Exceptions of the Extraction domain.

Errors specific to AI extraction, image processing, OCR and document parsing.
None of them ever crosses ExtractionOrchestrator.extract.
"""

from typing import Optional


class ExtractionError(Exception):
    """Base exception of the Extraction domain."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Extraction Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg


# --- AI ---------------------------------------------------------------------

class AIExtractionError(ExtractionError):
    """The AI collaborator failed (network, malformed response, schema mismatch)."""
    pass


class AIProviderError(AIExtractionError):
    """The AI provider could not be reached or refused the request."""
    pass


class AIResponseSchemaError(AIExtractionError):
    """The AI response could not be parsed or failed schema validation."""
    pass


# --- Images -----------------------------------------------------------------

class ImageProcessingError(ExtractionError):
    """Image transform failed."""
    pass


class ImageDecodingError(ImageProcessingError):
    """Buffer is not a decodable image."""
    pass


# --- OCR --------------------------------------------------------------------

class OCRProcessingError(ExtractionError):
    """OCR failed."""
    pass


class OCRProviderError(OCRProcessingError):
    """OCR engine is missing or misconfigured."""
    pass


class OCRResponseError(OCRProcessingError):
    """OCR engine returned an error for this image."""
    pass


class OCRTimeoutError(OCRProcessingError):
    """A single OCR call exceeded its timeout."""
    pass


# --- Documents --------------------------------------------------------------

class DocumentParseError(ExtractionError):
    """PDF text layer could not be parsed or rasterized."""
    pass


# --- Request lifecycle ------------------------------------------------------

class ExtractionTimeoutError(ExtractionError):
    """The request deadline expired."""
    pass


class ExtractionCancelledError(ExtractionError):
    """The caller cancelled the request."""
    pass


class ExtractionConfigurationError(ExtractionError):
    """Invalid configuration of the Extraction domain."""
    pass
