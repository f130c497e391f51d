"""
Google Cloud Vision engine, implementing IOCREngine.

Uses DOCUMENT_TEXT_DETECTION with language hints. Confidence is the mean
page confidence scaled to [0-100]. Tesseract-specific EngineOptions have no
Vision equivalent and are ignored.
"""

import os
from pathlib import Path
from typing import Optional, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import vision
from loguru import logger

from config.settings import GOOGLE_APPLICATION_CREDENTIALS, GOOGLE_VISION_LANGUAGE_HINTS
from medextract.domain.contracts import EngineOptions, OCROutput
from ...domain.exceptions import OCRProviderError, OCRResponseError, OCRTimeoutError
from ...domain.interfaces import IOCREngine


class GoogleVisionOCREngine(IOCREngine):
    """Wrapper over the Google Cloud Vision API."""

    name = "google_vision"

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        language_hints: Optional[Sequence[str]] = None,
        client: Optional[vision.ImageAnnotatorClient] = None
    ):
        """
        Args:
            credentials_path: Service account JSON; defaults to settings
            language_hints: Vision language hints; defaults to settings
            client: Prebuilt client (skips credential checks)
        """
        self.language_hints = list(language_hints or GOOGLE_VISION_LANGUAGE_HINTS)
        if client is not None:
            self.client = client
            return

        creds_path = credentials_path or GOOGLE_APPLICATION_CREDENTIALS
        if not creds_path:
            raise OCRProviderError(
                "Google credentials not set. Point GOOGLE_APPLICATION_CREDENTIALS at a service account file.",
                component="GoogleVisionOCREngine"
            )
        if not Path(creds_path).exists():
            raise OCRProviderError(f"Credentials file not found: {creds_path}", component="GoogleVisionOCREngine")

        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = str(creds_path)
        try:
            self.client = vision.ImageAnnotatorClient()
        except google_exceptions.GoogleAPIError as e:
            raise OCRProviderError(
                "Failed to initialise the Vision client",
                component="GoogleVisionOCREngine",
                original_error=e
            )
        logger.info("[GoogleVisionOCREngine] Client initialised")

    def recognize(
        self,
        image_content: bytes,
        locale: str,
        options: EngineOptions,
        timeout: float
    ) -> OCROutput:
        image = vision.Image(content=image_content)
        image_context = vision.ImageContext(language_hints=self.language_hints)

        try:
            response = self.client.document_text_detection(
                image=image,
                image_context=image_context,
                timeout=timeout
            )
        except google_exceptions.DeadlineExceeded as e:
            raise OCRTimeoutError(
                f"Vision call exceeded {timeout:.1f}s",
                component="GoogleVisionOCREngine",
                original_error=e
            )
        except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as e:
            raise OCRProviderError("Vision API refused credentials", component="GoogleVisionOCREngine", original_error=e)
        except google_exceptions.GoogleAPIError as e:
            raise OCRResponseError("Vision API call failed", component="GoogleVisionOCREngine", original_error=e)

        if response.error.message:
            raise OCRResponseError(
                f"Google Vision API error: {response.error.message}",
                component="GoogleVisionOCREngine"
            )

        annotation = response.full_text_annotation
        text = annotation.text if annotation else ""
        page_confidences = [page.confidence for page in annotation.pages] if annotation else []
        confidence = (sum(page_confidences) / len(page_confidences) * 100) if page_confidences else 0.0

        logger.debug(f"[GoogleVisionOCREngine] {len(text)} chars, confidence {confidence:.0f}")
        return OCROutput(text=text, confidence=confidence)
