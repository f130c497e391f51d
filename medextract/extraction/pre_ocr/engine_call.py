"""
OCR engine invocation shared by the pre-OCR stages.

Every call gets an explicit timeout clipped to the request deadline and one
retry on transient engine errors.
"""

from config.settings import (
    OCR_CALL_TIMEOUT_SECONDS,
    OCR_CHAR_WHITELIST,
    OCR_FAST_OEM,
    OCR_FAST_PSM,
    OCR_STRICT_OEM,
    OCR_STRICT_PSM,
)
from medextract.domain.contracts import EngineOptions, OCROutput
from ..domain.exceptions import OCRResponseError, OCRTimeoutError
from ..domain.interfaces import IOCREngine
from ..infrastructure.execution import ExtractionContext, call_external

TRANSIENT_OCR_ERRORS = (OCRTimeoutError, OCRResponseError)

# Deskew probes and quick scan: automatic segmentation, default engine
FAST_ENGINE_OPTIONS = EngineOptions(psm=OCR_FAST_PSM, oem=OCR_FAST_OEM)

# Preprocessing ladder: uniform block of text, LSTM, restricted charset
STRICT_ENGINE_OPTIONS = EngineOptions(
    psm=OCR_STRICT_PSM,
    oem=OCR_STRICT_OEM,
    char_whitelist=OCR_CHAR_WHITELIST,
    preserve_interword_spaces=True,
)


def run_ocr(
    engine: IOCREngine,
    image_content: bytes,
    *,
    locale: str,
    options: EngineOptions,
    context: ExtractionContext,
    component: str,
    timeout: float = OCR_CALL_TIMEOUT_SECONDS
) -> OCROutput:
    return call_external(
        lambda effective_timeout: engine.recognize(image_content, locale, options, effective_timeout),
        context=context,
        timeout=timeout,
        component=component,
        retry_on=TRANSIENT_OCR_ERRORS,
    )
