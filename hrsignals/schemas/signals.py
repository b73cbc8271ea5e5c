"""Feedback signal processor request/response schemas."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from hrsignals.schemas.common import CamelModel, UUIDStr


class ProcessCycleRequest(CamelModel):
    """Process every eligible subject of a cycle."""

    action: Literal["process_cycle"]
    company_id: UUIDStr
    cycle_id: UUIDStr


class ProcessEmployeeRequest(CamelModel):
    """Process one subject within a cycle."""

    action: Literal["process_employee"]
    company_id: UUIDStr
    cycle_id: UUIDStr
    employee_id: UUIDStr


class RecalculateSignalsRequest(CamelModel):
    """
    Reprocess a cycle, or one subject of it.

    Every run appends a new snapshot generation and retires the current one,
    so force_recalculate is accepted for callers that send it and is only logged.
    """

    action: Literal["recalculate_signals"]
    company_id: UUIDStr
    cycle_id: UUIDStr
    employee_id: UUIDStr | None = None
    force_recalculate: bool = False


class SignalSummaryRequest(CamelModel):
    """Read-only rollup of an employee's current signals."""

    action: Literal["get_signal_summary"]
    company_id: UUIDStr
    employee_id: UUIDStr


SignalProcessorRequest = Annotated[
    Union[
        ProcessCycleRequest,
        ProcessEmployeeRequest,
        RecalculateSignalsRequest,
        SignalSummaryRequest,
    ],
    Field(discriminator="action"),
]


class ProcessResult(BaseModel):
    """process_cycle / process_employee / recalculate_signals response."""

    success: bool = True
    processed: int
    employees: list[str] = Field(default_factory=list)


class ResponseEvidence(BaseModel):
    """One rating response with the context needed for signal mapping."""

    response_id: str
    rater_id: str
    rating_value: float
    question_text: str = ""
    question_category: str = ""
    rater_category: str = "unknown"
    rater_weight: float = 1.0


class RaterCategoryStats(BaseModel):
    """Unweighted rating stats for one rater category."""

    average: float
    count: int
    rater_count: int


class SignalAggregate(BaseModel):
    """Computed score for one (employee, signal) pair."""

    signal_code: str
    raw_score: float
    normalized_score: float
    confidence_score: float
    bias_risk_level: Literal["low", "medium", "high"]
    bias_factors: list[str] = Field(default_factory=list)
    evidence_count: int
    evidence_summary: dict[str, Any] = Field(default_factory=dict)
    rater_breakdown: dict[str, RaterCategoryStats] = Field(default_factory=dict)
    response_ids: list[str] = Field(default_factory=list)


class SignalEntry(BaseModel):
    """One current signal in a summary."""

    code: str
    name: str
    signal_category: str
    signal_value: float
    confidence_score: float
    bias_risk_level: str
    snapshot_version: int
    evidence_count: int


class SignalCategoryGroup(BaseModel):
    """Signals sharing a signal_category."""

    category: str
    average_value: float
    signals: list[SignalEntry] = Field(default_factory=list)


class SignalHighlight(BaseModel):
    """Strength or development area."""

    code: str
    name: str
    value: float


class SummaryStats(BaseModel):
    """Rollup across all current signals."""

    overall_score: float | None = None
    signal_count: int = 0
    avg_confidence: float = 0
    strengths: list[SignalHighlight] = Field(default_factory=list)
    development_areas: list[SignalHighlight] = Field(default_factory=list)


class SignalSummary(BaseModel):
    """get_signal_summary response."""

    signals: list[SignalCategoryGroup] = Field(default_factory=list)
    summary: SummaryStats = Field(default_factory=SummaryStats)
