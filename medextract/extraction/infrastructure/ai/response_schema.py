"""
Versioned schema of the AI response and its mapping to domain contracts.

Repair policy: the only accepted deviation is one markdown code fence around
the JSON body. Anything else (invalid JSON, truncated body, wrong schema
version, missing "parameters") is an AIResponseSchemaError.
"""

import json
import math
import re
from typing import List, Literal, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from config.settings import AI_RESPONSE_SCHEMA_VERSION
from contracts.extraction_result_dto import (
    AIInsights,
    BooleanParameter,
    CategoricalParameter,
    FreeTextParameter,
    HealthParameter,
    LifestyleAdvice,
    NumericParameter,
    Outlier,
    PatientInfo,
    RiskLevel,
    Severity,
)
from ...domain.exceptions import AIResponseSchemaError

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)

_TRUE_WORDS = {"true", "yes", "positive", "present", "1"}
_FALSE_WORDS = {"false", "no", "negative", "absent", "0"}

_RAW_CONFIG = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")


# ============================================================================
# RAW SCHEMA (wire shape of the model's answer)
# ============================================================================

class RawParameter(BaseModel):
    model_config = _RAW_CONFIG

    name: Optional[str] = None
    value: Union[bool, float, str, None] = None
    unit: Optional[str] = None
    normal_range: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    parameter_type: Literal["numeric", "categorical", "text", "boolean"] = "numeric"
    text_value: Optional[str] = None


class RawOutlier(BaseModel):
    model_config = _RAW_CONFIG

    parameter: Optional[str] = None
    value: Union[bool, float, str, None] = None
    normal_range: Optional[str] = None
    severity: Optional[str] = None
    concern: Optional[str] = None
    recommendation: Optional[str] = None


class RawLifestyle(BaseModel):
    model_config = _RAW_CONFIG

    diet: List[str] = Field(default_factory=list)
    exercise: List[str] = Field(default_factory=list)
    habits: List[str] = Field(default_factory=list)


class RawInsights(BaseModel):
    model_config = _RAW_CONFIG

    summary: Optional[str] = None
    outliers: List[RawOutlier] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    risk_level: Optional[str] = None
    positive_findings: List[str] = Field(default_factory=list)
    trends_to_monitor: List[str] = Field(default_factory=list)
    lifestyle: Optional[RawLifestyle] = None


class RawPatientInfo(BaseModel):
    model_config = _RAW_CONFIG

    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    test_date: Optional[str] = None
    hospital: Optional[str] = None

    @field_validator("age", mode="before")
    @classmethod
    def age_as_text(cls, v: object) -> Optional[str]:
        return None if v is None else str(v)


class AIReportResponse(BaseModel):
    """Top-level AI answer, schema version "1"."""

    model_config = _RAW_CONFIG

    schema_version: Literal["1"]
    parameters: List[RawParameter]
    patient_info: Optional[RawPatientInfo] = None
    insights: Optional[RawInsights] = None
    extracted_text: Optional[str] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)


# ============================================================================
# PARSING
# ============================================================================

def strip_code_fence(text: str) -> str:
    """Removes one surrounding ``` / ```json fence, nothing else."""
    stripped = text.strip()
    match = _CODE_FENCE.match(stripped)
    return match.group(1).strip() if match else stripped


def parse_ai_response(text: str) -> AIReportResponse:
    """
    Parses and validates the raw model answer.

    Raises:
        AIResponseSchemaError: invalid JSON or schema violation
    """
    body = strip_code_fence(text or "")
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise AIResponseSchemaError(
            f"AI response is not valid JSON ({len(body)} chars)",
            component="AIResponseSchema",
            original_error=e
        )

    if isinstance(data, dict) and data.get("schemaVersion") not in (None, AI_RESPONSE_SCHEMA_VERSION):
        raise AIResponseSchemaError(
            f"Unsupported AI schema version: {data.get('schemaVersion')!r}",
            component="AIResponseSchema"
        )

    try:
        return AIReportResponse.model_validate(data)
    except ValidationError as e:
        raise AIResponseSchemaError(
            f"AI response failed schema validation ({e.error_count()} errors)",
            component="AIResponseSchema",
            original_error=e
        )


# ============================================================================
# MAPPING TO DOMAIN
# ============================================================================

def sanitize_severity(raw: Optional[str]) -> Severity:
    normalized = (raw or "").strip().lower()
    if normalized in ("mild", "low"):
        return Severity.MILD
    if normalized == "moderate":
        return Severity.MODERATE
    if normalized in ("severe", "high", "critical"):
        return Severity.SEVERE
    return Severity.UNKNOWN


def sanitize_risk_level(raw: Optional[str]) -> RiskLevel:
    normalized = (raw or "").strip().lower()
    if normalized == "low":
        return RiskLevel.LOW
    if normalized in ("moderate", "medium"):
        return RiskLevel.MODERATE
    if normalized in ("high", "severe"):
        return RiskLevel.HIGH
    return RiskLevel.UNKNOWN


def _as_number(value: object) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_text(raw: RawParameter) -> str:
    if raw.text_value:
        return raw.text_value
    if raw.value is not None and str(raw.value).strip():
        return str(raw.value)
    return "N/A"


def to_health_parameter(raw: RawParameter) -> HealthParameter:
    """
    Maps one raw parameter to the tagged union.

    Numeric parameters whose value is not a finite number become free text
    instead of a placeholder zero.
    """
    common = dict(
        name=(raw.name or "").strip() or "Unknown",
        normal_range=raw.normal_range or "N/A",
        status=raw.status,
        category=raw.category or "General",
    )

    if raw.parameter_type == "numeric":
        number = _as_number(raw.value)
        if number is not None:
            return NumericParameter(value=number, unit=raw.unit or "", **common)
        logger.debug(f"[AIResponseSchema] Non-numeric value for {common['name']!r}, kept as text")
        return FreeTextParameter(text=_as_text(raw), **common)

    if raw.parameter_type == "boolean":
        if isinstance(raw.value, bool):
            return BooleanParameter(value=raw.value, **common)
        word = str(raw.text_value or raw.value or "").strip().lower()
        if word in _TRUE_WORDS or word in _FALSE_WORDS:
            return BooleanParameter(value=word in _TRUE_WORDS, **common)
        return FreeTextParameter(text=_as_text(raw), **common)

    if raw.parameter_type == "categorical":
        return CategoricalParameter(text=_as_text(raw), **common)

    return FreeTextParameter(text=_as_text(raw), **common)


def to_insights(raw: Optional[RawInsights]) -> Optional[AIInsights]:
    if raw is None:
        return None
    lifestyle = raw.lifestyle or RawLifestyle()
    return AIInsights(
        summary=raw.summary or "",
        outliers=tuple(
            Outlier(
                parameter=o.parameter or "",
                value=o.value,
                normal_range=o.normal_range or "",
                severity=sanitize_severity(o.severity),
                concern=o.concern or "",
                recommendation=o.recommendation or "",
            )
            for o in raw.outliers
        ),
        recommendations=tuple(raw.recommendations),
        risk_level=sanitize_risk_level(raw.risk_level),
        positive_findings=tuple(raw.positive_findings),
        trends_to_monitor=tuple(raw.trends_to_monitor),
        lifestyle=LifestyleAdvice(
            diet=tuple(lifestyle.diet),
            exercise=tuple(lifestyle.exercise),
            habits=tuple(lifestyle.habits),
        ),
    )


def to_patient_info(raw: Optional[RawPatientInfo]) -> Optional[PatientInfo]:
    if raw is None:
        return None
    return PatientInfo(**raw.model_dump())
