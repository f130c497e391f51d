"""
Validation contracts between the stages of the OCR pipeline.

Each contract guarantees:
  1. Correct data types (type safety)
  2. Values within their ranges (confidence in [0, 100], scores >= 0)
  3. Required fields present (completeness)

All models use pydantic v2 with field validators.
"""

import math
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contracts.extraction_result_dto import (
    AIInsights,
    HealthParameter,
    PatientInfo,
)


class ContractValidationError(Exception):
    """A stage produced data that violates its output contract."""

    def __init__(self, stage: str, contract: str, errors: List[Dict]):
        self.stage = stage
        self.contract = contract
        self.errors = errors
        super().__init__(f"[{stage}] contract {contract} violated: {errors}")


# ============================================================================
# OCR ENGINE
# ============================================================================

class EngineOptions(BaseModel):
    """Engine settings for one OCR call (Tesseract semantics)."""

    model_config = ConfigDict(frozen=True)

    psm: int = Field(3, ge=0, le=13, description="Page segmentation mode")
    oem: int = Field(3, ge=0, le=3, description="OCR engine mode")
    char_whitelist: Optional[str] = Field(None, description="Allowed characters")
    preserve_interword_spaces: bool = Field(False)


class OCROutput(BaseModel):
    """Text recognised by the engine on one image."""

    model_config = ConfigDict(frozen=True)

    text: str = Field("", description="Recognised text")
    confidence: float = Field(0.0, ge=0, le=100, description="Engine confidence [0-100]")

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        v = float(v)
        if math.isnan(v):
            return 0.0
        return min(max(v, 0.0), 100.0)


# ============================================================================
# QUALITY SCORING
# ============================================================================

class TextMetrics(BaseModel):
    """Raw evidence counted in a candidate text."""

    model_config = ConfigDict(frozen=True)

    char_count: int = Field(0, ge=0)
    table_patterns: int = Field(0, ge=0)
    medical_term_count: int = Field(0, ge=0)
    unit_patterns: int = Field(0, ge=0)


class ScoreBreakdown(BaseModel):
    """One additive contribution per evidence type."""

    model_config = ConfigDict(frozen=True)

    content: float = Field(0.0, ge=0)
    structure: float = Field(0.0, ge=0)
    medical_content: float = Field(0.0, ge=0)
    units: float = Field(0.0, ge=0)
    confidence: float = Field(0.0, ge=0)

    @property
    def total(self) -> float:
        return self.content + self.structure + self.medical_content + self.units + self.confidence


class QualityScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: float = Field(..., ge=0)
    breakdown: ScoreBreakdown
    metrics: TextMetrics

    @classmethod
    def zero(cls) -> "QualityScore":
        return cls(total=0.0, breakdown=ScoreBreakdown(), metrics=TextMetrics())


class CandidateExtraction(BaseModel):
    """Text produced by one preprocessing variant, with its score."""

    model_config = ConfigDict(frozen=True)

    variant: str
    text: str = ""
    engine_confidence: float = Field(0.0, ge=0, le=100)
    quality: QualityScore = Field(default_factory=QualityScore.zero)
    error: Optional[str] = None

    @property
    def quality_score(self) -> float:
        return self.quality.total

    @property
    def failed(self) -> bool:
        return self.error is not None


# ============================================================================
# DESKEW
# ============================================================================

class DeskewResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    image_bytes: bytes = Field(..., repr=False)
    rotation: int = Field(0, description="Applied clockwise rotation: 0, 90, 180 or 270")
    probe_lengths: Dict[int, int] = Field(
        default_factory=dict, description="Recognised text length per probed rotation"
    )

    @field_validator("rotation")
    @classmethod
    def axis_aligned(cls, v: int) -> int:
        if v not in (0, 90, 180, 270):
            raise ValueError(f"Rotation must be a multiple of 90, got: {v}")
        return v


# ============================================================================
# AI EXTRACTOR
# ============================================================================

class AIExtractionOutcome(BaseModel):
    """What the AI collaborator returned for one document."""

    model_config = ConfigDict(frozen=True)

    success: bool
    health_parameters: Tuple[HealthParameter, ...] = ()
    ai_insights: Optional[AIInsights] = None
    patient_info: Optional[PatientInfo] = None
    extracted_text: str = ""
    confidence: float = Field(0.0, ge=0, le=1)
    model: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# IMAGE PIPELINE REPORT
# ============================================================================

class RecognitionReport(BaseModel):
    """What ImagePreprocessingPipeline decided for one image."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(" ", description="Final text (sentinel when nothing usable)")
    rotation: int = Field(0, description="Rotation applied by deskew")
    accepted_by_quick_scan: bool = False
    quick_scan: Optional[CandidateExtraction] = None
    candidates: Tuple[CandidateExtraction, ...] = ()
    selected_variant: Optional[str] = None


# ============================================================================
# OCR METHOD
# ============================================================================

class OCRExtractionOutcome(BaseModel):
    """Result of the OCR method (text extraction + parsing + classification)."""

    model_config = ConfigDict(frozen=True)

    success: bool
    extracted_text: str = " "
    health_parameters: Tuple[HealthParameter, ...] = ()
    is_scanned_document: bool = False
    error: Optional[str] = None
