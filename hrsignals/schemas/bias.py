"""Bias detector request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from hrsignals.schemas.common import CamelModel, UUIDStr

BiasType = Literal[
    "recency", "leniency", "severity", "halo", "horn", "central_tendency", "contrast"
]
Severity = Literal["low", "medium", "high"]
BiasAction = Literal[
    "analyze_manager_patterns",
    "detect_recency_bias",
    "detect_distribution_bias",
    "detect_halo_horn",
    "generate_nudge",
]


class DimensionScore(CamelModel):
    """One per-dimension rating inside a review."""

    dimension: str
    score: float
    date: datetime | None = None


class RatingSample(CamelModel):
    """One employee's review from the manager's batch."""

    employee_id: str
    employee_name: str | None = None
    scores: list[DimensionScore] = Field(default_factory=list)
    overall_score: float
    review_date: datetime | None = None


class BiasDetectionRequest(CamelModel):
    """POST /functions/v1/enhanced-bias-detector request."""

    action: BiasAction = "analyze_manager_patterns"
    manager_id: UUIDStr
    company_id: UUIDStr
    cycle_id: UUIDStr | None = None
    ratings: list[RatingSample] = Field(default_factory=list)


class AffectedEmployee(CamelModel):
    """Employee named by a pattern, with the observed impact."""

    employee_id: str
    employee_name: str | None = None
    impact: str


class BiasPattern(CamelModel):
    """Classified finding from one detector."""

    type: BiasType
    severity: Severity
    confidence: float
    evidence_count: int
    affected_employees: list[AffectedEmployee] = Field(default_factory=list)
    description: str


class Nudge(CamelModel):
    """Coaching message attached to a pattern."""

    template_id: str | None = None
    title: str
    message: str
    suggested_action: str | None = None
    educational_content: str | None = None


class EnrichedPattern(BiasPattern):
    """Pattern with its persisted id and resolved nudge."""

    id: str | None = None
    nudge: Nudge


class SeveritySummary(CamelModel):
    """Pattern counts by severity."""

    total_patterns: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0


class BiasDetectionResponse(CamelModel):
    """Full analysis response."""

    patterns: list[EnrichedPattern] = Field(default_factory=list)
    summary: SeveritySummary


class InsufficientSampleResponse(CamelModel):
    """Returned when the batch is too small to analyze."""

    patterns: list[EnrichedPattern] = Field(default_factory=list)
    message: str
