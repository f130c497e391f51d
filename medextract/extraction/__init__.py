"""
Extraction domain: lab report document -> health parameters.

1. AI vision extraction (Gemini)
2. OCR fallback: deskew, preprocessing ladder, best-of-N quality selection
3. Text-pattern parsing of the recognised text

Domain boundary: contracts.ExtractionResult
"""

from .application.factory import ExtractionComponentFactory
from .application.orchestrator import ExtractionOrchestrator
from .infrastructure.execution import CancellationToken

__all__ = [
    "ExtractionComponentFactory",
    "ExtractionOrchestrator",
    "CancellationToken",
]
