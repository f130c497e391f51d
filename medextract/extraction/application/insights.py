"""
Basic (non-AI) insights for OCR extractions, derived from parameter statuses.
"""

from typing import Sequence

from contracts.extraction_result_dto import (
    AIInsights,
    HealthParameter,
    Outlier,
    ParameterStatus,
    RiskLevel,
    Severity,
    display_value,
)

OUT_OF_RANGE = (ParameterStatus.HIGH, ParameterStatus.LOW)
MODERATE_RISK_OUTLIERS = 2


def generate_basic_insights(parameters: Sequence[HealthParameter]) -> AIInsights:
    """
    Summarises parameter statuses:
    - outliers: High/Low parameters
    - risk: Moderate with more than two outliers, Low otherwise
    - positive findings: every Normal parameter
    """
    outliers = [p for p in parameters if p.status in OUT_OF_RANGE]

    recommendations = []
    if outliers:
        recommendations.append("Some parameters are outside normal range - consult your healthcare provider")
    elif parameters:
        recommendations.append("All measured parameters appear to be within normal ranges")

    if outliers:
        summary = f"{len(outliers)} parameter(s) outside normal range detected"
    else:
        summary = "All parameters within normal ranges"

    return AIInsights(
        summary=summary,
        outliers=tuple(
            Outlier(
                parameter=p.name,
                value=display_value(p),
                normal_range=p.normal_range,
                severity=Severity.UNKNOWN,
                concern=f"{p.name} is {p.status.value.lower()}",
            )
            for p in outliers
        ),
        recommendations=tuple(recommendations),
        risk_level=RiskLevel.MODERATE if len(outliers) > MODERATE_RISK_OUTLIERS else RiskLevel.LOW,
        positive_findings=tuple(
            f"{p.name} is within normal range" for p in parameters if p.status == ParameterStatus.NORMAL
        ),
    )
