"""Tests for the extraction result contracts."""

import pytest
from pydantic import ValidationError

from contracts.extraction_result_dto import (
    BooleanParameter,
    ExtractionAttempt,
    ExtractionLog,
    ExtractionMethod,
    ExtractionOptions,
    ExtractionResult,
    NumericParameter,
    ParameterStatus,
    RawDocument,
    display_value,
    normalize_status,
)


def log(method):
    return ExtractionLog(final_method=method, total_time_ms=1.0)


class TestStatusNormalisation:

    @pytest.mark.parametrize("raw, expected", [
        ("Normal", ParameterStatus.NORMAL),
        ("within range", ParameterStatus.NORMAL),
        ("ABNORMAL", ParameterStatus.ABNORMAL),
        ("Diagnosed 2019", ParameterStatus.ABNORMAL),
        ("elevated", ParameterStatus.HIGH),
        ("decreased", ParameterStatus.LOW),
        ("none", ParameterStatus.ABSENT),
        ("present", ParameterStatus.PRESENT),
        ("", ParameterStatus.UNKNOWN),
        (None, ParameterStatus.UNKNOWN),
        ("borderline", ParameterStatus.UNKNOWN),
    ])
    def test_normalize_status(self, raw, expected):
        assert normalize_status(raw) == expected

    def test_parameter_status_is_coerced(self):
        assert NumericParameter(name="LDL", value=160, status="elevated").status == ParameterStatus.HIGH


class TestParameters:

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            NumericParameter(name="   ", value=1)

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValidationError):
            NumericParameter(name="Glucose", value=float("nan"))

    def test_display_value(self):
        assert display_value(BooleanParameter(name="Smoker", value=False)) is False


class TestResult:

    def test_requires_manual_entry_follows_parameters(self):
        empty = ExtractionResult(method=ExtractionMethod.OCR, extraction_log=log(ExtractionMethod.OCR))
        full = ExtractionResult(
            method=ExtractionMethod.OCR,
            health_parameters=(NumericParameter(name="Glucose", value=95),),
            extraction_log=log(ExtractionMethod.OCR),
        )

        assert empty.requires_manual_entry
        assert not full.requires_manual_entry

    def test_log_method_must_match(self):
        with pytest.raises(ValidationError):
            ExtractionResult(method=ExtractionMethod.AI, extraction_log=log(ExtractionMethod.OCR))

    def test_attempt_cannot_be_failed_method(self):
        with pytest.raises(ValidationError):
            ExtractionAttempt(method=ExtractionMethod.FAILED, success=False, processing_time_ms=0)

    def test_wire_format_is_camel_case(self):
        result = ExtractionResult(
            method=ExtractionMethod.OCR,
            health_parameters=(NumericParameter(name="Glucose", value=95, normal_range="70-100"),),
            extraction_log=log(ExtractionMethod.OCR),
        )

        wire = result.to_wire()

        assert wire["method"] == "ocr"
        assert wire["requiresManualEntry"] is False
        assert wire["isScannedDocument"] is False
        assert wire["healthParameters"][0]["normalRange"] == "70-100"
        assert wire["healthParameters"][0]["parameterType"] == "numeric"
        assert wire["extractionLog"]["finalMethod"] == "ocr"

    def test_result_is_immutable(self):
        result = ExtractionResult(method=ExtractionMethod.OCR, extraction_log=log(ExtractionMethod.OCR))
        with pytest.raises(ValidationError):
            result.is_scanned_document = True


class TestRequest:

    def test_unsupported_mime_type_rejected(self):
        with pytest.raises(ValidationError):
            RawDocument(buffer=b"x", mime_type="image/gif")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ExtractionOptions(timeout_seconds=0)

    def test_defaults(self):
        options = ExtractionOptions()
        assert options.force_method is None
        assert options.prefer_ai and options.include_insights
