"""
DTO contracts exposed by medextract.

All contracts use pydantic v2 for validation.

Contracts:
- Caller -> Extraction: RawDocument, ExtractionOptions
- Extraction -> Caller: ExtractionResult (extraction_result_dto.py)
"""

from .extraction_result_dto import (
    AIInsights,
    BooleanParameter,
    CategoricalParameter,
    ExtractionAttempt,
    ExtractionLog,
    ExtractionMethod,
    ExtractionOptions,
    ExtractionResult,
    FreeTextParameter,
    HealthParameter,
    LifestyleAdvice,
    NumericParameter,
    Outlier,
    ParameterStatus,
    PatientInfo,
    RawDocument,
    RiskLevel,
    Severity,
    display_value,
    normalize_status,
)

__all__ = [
    # Request
    "RawDocument",
    "ExtractionOptions",
    # Parameters
    "HealthParameter",
    "NumericParameter",
    "CategoricalParameter",
    "BooleanParameter",
    "FreeTextParameter",
    "ParameterStatus",
    "normalize_status",
    "display_value",
    # Insights
    "AIInsights",
    "Outlier",
    "LifestyleAdvice",
    "PatientInfo",
    "Severity",
    "RiskLevel",
    # Result
    "ExtractionMethod",
    "ExtractionAttempt",
    "ExtractionLog",
    "ExtractionResult",
]
