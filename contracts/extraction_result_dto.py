"""
DTO contract: Extraction -> caller.

Canonical output of one extraction call plus the request-side models
(RawDocument, ExtractionOptions).

Wire names are camelCase (``model_dump(by_alias=True)``), Python attributes
stay snake_case.

VALIDATION: pydantic guarantees every result is well formed.
"""

import math
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel


_WIRE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


# ============================================================================
# REQUEST
# ============================================================================

class ExtractionMethod(str, Enum):
    """Terminal method of an extraction call."""
    AI = "ai"
    OCR = "ocr"
    FAILED = "failed"


class RawDocument(BaseModel):
    """Uploaded document, owned by the caller for one extraction call."""

    model_config = _WIRE_CONFIG

    buffer: bytes = Field(..., repr=False, description="Raw file bytes")
    mime_type: Literal["application/pdf", "image/png", "image/jpeg"] = Field(
        ..., description="Declared MIME type"
    )

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == "application/pdf"


class ExtractionOptions(BaseModel):
    """Per-request extraction options."""

    model_config = _WIRE_CONFIG

    force_method: Optional[Literal["ai", "ocr"]] = Field(
        None, description="Run only this method (None = auto: AI first, OCR fallback)"
    )
    prefer_ai: bool = Field(True, description="In auto mode, try the AI extractor first")
    include_insights: bool = Field(True, description="Attach insights to the result")
    timeout_seconds: Optional[float] = Field(
        None, gt=0, description="Request deadline; None = settings default"
    )


# ============================================================================
# HEALTH PARAMETERS (tagged union on parameter_type)
# ============================================================================

class ParameterStatus(str, Enum):
    NORMAL = "Normal"
    HIGH = "High"
    LOW = "Low"
    ABNORMAL = "Abnormal"
    PRESENT = "Present"
    ABSENT = "Absent"
    UNKNOWN = "Unknown"


def normalize_status(raw: object) -> ParameterStatus:
    """Maps free-form status strings ("elevated", "within range", ...) to ParameterStatus."""
    if isinstance(raw, ParameterStatus):
        return raw
    if raw is None:
        return ParameterStatus.UNKNOWN

    normalized = str(raw).strip().lower()
    if not normalized:
        return ParameterStatus.UNKNOWN

    # "abnormal" contains "normal", check it first
    if "abnormal" in normalized or "diagnosed" in normalized:
        return ParameterStatus.ABNORMAL
    if "normal" in normalized or normalized == "within range":
        return ParameterStatus.NORMAL
    if "high" in normalized or "elevated" in normalized:
        return ParameterStatus.HIGH
    if "low" in normalized or "decreased" in normalized:
        return ParameterStatus.LOW
    if "absent" in normalized or normalized == "none":
        return ParameterStatus.ABSENT
    if "present" in normalized:
        return ParameterStatus.PRESENT
    return ParameterStatus.UNKNOWN


class _HealthParameterBase(BaseModel):
    model_config = _WIRE_CONFIG

    name: str = Field(..., min_length=1, description="Parameter name as printed / canonicalised")
    normal_range: str = Field("N/A", description="Reference range as printed")
    status: ParameterStatus = Field(ParameterStatus.UNKNOWN)
    category: str = Field("General")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Parameter name must not be blank")
        return v.strip()

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: object) -> ParameterStatus:
        return normalize_status(v)


class NumericParameter(_HealthParameterBase):
    parameter_type: Literal["numeric"] = "numeric"
    value: float
    unit: str = ""

    @field_validator("value")
    @classmethod
    def value_is_finite(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("Numeric parameter value must be finite")
        return v


class CategoricalParameter(_HealthParameterBase):
    parameter_type: Literal["categorical"] = "categorical"
    text: str


class BooleanParameter(_HealthParameterBase):
    parameter_type: Literal["boolean"] = "boolean"
    value: bool


class FreeTextParameter(_HealthParameterBase):
    parameter_type: Literal["text"] = "text"
    text: str


HealthParameter = Annotated[
    Union[NumericParameter, CategoricalParameter, BooleanParameter, FreeTextParameter],
    Field(discriminator="parameter_type"),
]


def display_value(parameter: "HealthParameter") -> Union[float, bool, str]:
    """Value of any parameter variant, as shown to a reader."""
    if isinstance(parameter, (NumericParameter, BooleanParameter)):
        return parameter.value
    return parameter.text


# ============================================================================
# INSIGHTS / PATIENT
# ============================================================================

class Severity(str, Enum):
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"
    UNKNOWN = "Unknown"


class RiskLevel(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    UNKNOWN = "Unknown"


class Outlier(BaseModel):
    model_config = _WIRE_CONFIG

    parameter: str = ""
    value: Union[float, bool, str, None] = None
    normal_range: str = ""
    severity: Severity = Severity.UNKNOWN
    concern: str = ""
    recommendation: str = ""


class LifestyleAdvice(BaseModel):
    model_config = _WIRE_CONFIG

    diet: Tuple[str, ...] = ()
    exercise: Tuple[str, ...] = ()
    habits: Tuple[str, ...] = ()


class AIInsights(BaseModel):
    model_config = _WIRE_CONFIG

    summary: str = ""
    outliers: Tuple[Outlier, ...] = ()
    recommendations: Tuple[str, ...] = ()
    risk_level: RiskLevel = RiskLevel.UNKNOWN
    positive_findings: Tuple[str, ...] = ()
    trends_to_monitor: Tuple[str, ...] = ()
    lifestyle: LifestyleAdvice = Field(default_factory=LifestyleAdvice)


class PatientInfo(BaseModel):
    model_config = _WIRE_CONFIG

    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    test_date: Optional[str] = None
    hospital: Optional[str] = None


# ============================================================================
# AUDIT TRAIL
# ============================================================================

class ExtractionAttempt(BaseModel):
    """One top-level method invocation (never one per preprocessing variant)."""

    model_config = _WIRE_CONFIG

    method: ExtractionMethod
    success: bool
    processing_time_ms: float = Field(..., ge=0)
    parameter_count: int = Field(0, ge=0)
    error: Optional[str] = None

    @field_validator("method")
    @classmethod
    def method_is_concrete(cls, v: ExtractionMethod) -> ExtractionMethod:
        if v == ExtractionMethod.FAILED:
            raise ValueError("An attempt is made with 'ai' or 'ocr', never 'failed'")
        return v


class ExtractionLog(BaseModel):
    model_config = _WIRE_CONFIG

    attempts: Tuple[ExtractionAttempt, ...] = ()
    final_method: ExtractionMethod
    total_time_ms: float = Field(..., ge=0)
    error: Optional[str] = None


# ============================================================================
# RESULT
# ============================================================================

class ExtractionResult(BaseModel):
    """
    Canonical output of ExtractionOrchestrator.extract.

    ``requires_manual_entry`` is derived from ``health_parameters`` and
    cannot be set independently.
    """

    model_config = _WIRE_CONFIG

    method: ExtractionMethod
    extracted_text: str = " "
    health_parameters: Tuple[HealthParameter, ...] = ()
    ai_insights: Optional[AIInsights] = None
    patient_info: Optional[PatientInfo] = None
    is_scanned_document: bool = False
    extraction_log: ExtractionLog

    @computed_field(alias="requiresManualEntry")
    @property
    def requires_manual_entry(self) -> bool:
        return len(self.health_parameters) == 0

    @field_validator("extraction_log")
    @classmethod
    def log_matches_method(cls, v: ExtractionLog, info) -> ExtractionLog:
        method = info.data.get("method")
        if method is not None and v.final_method != method:
            raise ValueError(
                f"extraction_log.final_method ({v.final_method.value}) != method ({method.value})"
            )
        return v

    def to_wire(self) -> Dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


__all__: List[str] = [
    "ExtractionMethod",
    "RawDocument",
    "ExtractionOptions",
    "ParameterStatus",
    "normalize_status",
    "NumericParameter",
    "CategoricalParameter",
    "BooleanParameter",
    "FreeTextParameter",
    "HealthParameter",
    "display_value",
    "Severity",
    "RiskLevel",
    "Outlier",
    "LifestyleAdvice",
    "AIInsights",
    "PatientInfo",
    "ExtractionAttempt",
    "ExtractionLog",
    "ExtractionResult",
]
