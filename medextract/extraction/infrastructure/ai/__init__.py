"""
AI extraction infrastructure (Gemini).
"""

from .gemini_client import GeminiClient
from .gemini_extractor import GeminiReportExtractor
from .response_schema import AIReportResponse, parse_ai_response, strip_code_fence

__all__ = [
    "GeminiClient",
    "GeminiReportExtractor",
    "AIReportResponse",
    "parse_ai_response",
    "strip_code_fence",
]
