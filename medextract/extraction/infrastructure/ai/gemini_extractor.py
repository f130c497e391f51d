"""
AI extractor backed by Gemini, implementing IAIExtractor.
"""

import time
from typing import Optional

from loguru import logger

from medextract.domain.contracts import AIExtractionOutcome
from ...domain.interfaces import IAIExtractor
from .gemini_client import GeminiClient
from .prompt import REPORT_EXTRACTION_PROMPT
from .response_schema import parse_ai_response, to_health_parameter, to_insights, to_patient_info

DEFAULT_CONFIDENCE = 0.8


class GeminiReportExtractor(IAIExtractor):
    """
    Sends the whole document to Gemini and maps the JSON answer to
    health parameters, insights and patient info.

    Without a client handle the extractor reports itself as not configured
    and the orchestrator goes straight to OCR.
    """

    def __init__(self, client: Optional[GeminiClient], prompt: str = REPORT_EXTRACTION_PROMPT):
        self.client = client
        self.prompt = prompt

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def extract(self, buffer: bytes, mime_type: str, timeout: float) -> AIExtractionOutcome:
        """
        Raises:
            AIProviderError: transport or provider failure
            AIResponseSchemaError: unusable answer
        """
        if self.client is None:
            return AIExtractionOutcome(success=False, error="AI extractor is not configured")

        start = time.perf_counter()
        raw_text = self.client.generate(self.prompt, buffer, mime_type, timeout)
        response = parse_ai_response(raw_text)

        parameters = tuple(to_health_parameter(p) for p in response.parameters)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"[GeminiReportExtractor] {len(parameters)} parameters in {elapsed_ms:.0f}ms "
            f"(model {self.client.model_name})"
        )

        return AIExtractionOutcome(
            success=True,
            health_parameters=parameters,
            ai_insights=to_insights(response.insights),
            patient_info=to_patient_info(response.patient_info),
            extracted_text=response.extracted_text or "",
            confidence=response.confidence if response.confidence is not None else DEFAULT_CONFIDENCE,
            model=self.client.model_name,
        )
