"""
Gemini client handle (google-generativeai).

Built once by ExtractionComponentFactory and shared by every extraction;
GenerativeModel calls are independent HTTP requests.
"""

from typing import Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from loguru import logger

from config.settings import GEMINI_MODEL
from ...domain.exceptions import AIProviderError, AIResponseSchemaError, ExtractionConfigurationError


class GeminiClient:
    """Thin wrapper over genai.GenerativeModel with domain exceptions."""

    def __init__(self, api_key: str, model_name: str = GEMINI_MODEL, model: Optional[genai.GenerativeModel] = None):
        if not api_key and model is None:
            raise ExtractionConfigurationError("GEMINI_API_KEY is not set", component="GeminiClient")
        self.model_name = model_name
        if model is not None:
            self.model = model
        else:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name)
        logger.info(f"[GeminiClient] Model ready: {model_name}")

    def generate(self, prompt: str, buffer: bytes, mime_type: str, timeout: float) -> str:
        """
        Sends the prompt and the document inline, returns the raw response text.

        Raises:
            AIProviderError: transport, quota or server error
            AIResponseSchemaError: the response carries no text (blocked / empty)
        """
        try:
            response = self.model.generate_content(
                [prompt, {"mime_type": mime_type, "data": buffer}],
                generation_config={"response_mime_type": "application/json"},
                request_options={"timeout": timeout},
            )
        except google_exceptions.DeadlineExceeded as e:
            raise AIProviderError(f"Gemini call exceeded {timeout:.1f}s", component="GeminiClient", original_error=e)
        except google_exceptions.GoogleAPIError as e:
            raise AIProviderError("Gemini call failed", component="GeminiClient", original_error=e)

        try:
            text = response.text
        except ValueError as e:
            # raised by the SDK when the candidate was blocked or has no parts
            raise AIResponseSchemaError("Gemini returned no text", component="GeminiClient", original_error=e)

        logger.debug(f"[GeminiClient] Raw response length: {len(text)}")
        return text
