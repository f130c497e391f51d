"""
Domain layer of the Extraction domain.

Interfaces (abstract classes) and exceptions.
"""

from .interfaces import (
    IOCREngine,
    IAIExtractor,
    IParameterParser,
    IPdfTextReader,
    IPdfRasterizer,
)

from .exceptions import (
    ExtractionError,
    AIExtractionError,
    AIProviderError,
    AIResponseSchemaError,
    ImageProcessingError,
    ImageDecodingError,
    OCRProcessingError,
    OCRProviderError,
    OCRResponseError,
    OCRTimeoutError,
    DocumentParseError,
    ExtractionTimeoutError,
    ExtractionCancelledError,
    ExtractionConfigurationError,
)

__all__ = [
    # Interfaces
    "IOCREngine",
    "IAIExtractor",
    "IParameterParser",
    "IPdfTextReader",
    "IPdfRasterizer",

    # Exceptions
    "ExtractionError",
    "AIExtractionError",
    "AIProviderError",
    "AIResponseSchemaError",
    "ImageProcessingError",
    "ImageDecodingError",
    "OCRProcessingError",
    "OCRProviderError",
    "OCRResponseError",
    "OCRTimeoutError",
    "DocumentParseError",
    "ExtractionTimeoutError",
    "ExtractionCancelledError",
    "ExtractionConfigurationError",
]
