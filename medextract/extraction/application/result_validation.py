"""
Post-extraction checks and monitoring statistics.
"""

import math
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from contracts.extraction_result_dto import ExtractionMethod, ExtractionResult, NumericParameter


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    issues: List[str] = Field(default_factory=list)


def validate_extraction_result(result: ExtractionResult) -> ValidationReport:
    """Flags results that should not be stored without review."""
    issues: List[str] = []

    if result.method == ExtractionMethod.FAILED:
        issues.append("Extraction not successful")

    if not result.health_parameters and not result.requires_manual_entry:
        issues.append("No parameters extracted but manual entry not flagged")

    for index, parameter in enumerate(result.health_parameters):
        if not parameter.name or not parameter.name.strip():
            issues.append(f"Parameter {index}: Missing name")
        if isinstance(parameter, NumericParameter) and not math.isfinite(parameter.value):
            issues.append(f"Parameter {index} ({parameter.name}): Invalid value")

    return ValidationReport(is_valid=not issues, issues=issues)


def extraction_stats(result: ExtractionResult) -> Dict[str, Any]:
    """Flat summary for logs and monitoring."""
    return {
        "method": result.method.value,
        "success": result.method != ExtractionMethod.FAILED,
        "parameter_count": len(result.health_parameters),
        "processing_time_ms": round(result.extraction_log.total_time_ms, 1),
        "has_insights": result.ai_insights is not None,
        "requires_manual_entry": result.requires_manual_entry,
        "is_scanned_document": result.is_scanned_document,
        "attempted_methods": [attempt.method.value for attempt in result.extraction_log.attempts],
    }
