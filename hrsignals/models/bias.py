"""Bias pattern, nudge template, explainability and notification models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from hrsignals.database import Base, JSONType


class ManagerBiasPattern(Base):
    """Detected rater-bias findings - append-only."""

    __tablename__ = "manager_bias_patterns"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    manager_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    company_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    cycle_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    bias_type: Mapped[str] = mapped_column(String(32), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    evidence_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    affected_employees: Mapped[list] = mapped_column(JSONType, nullable=False)
    pattern_description: Mapped[str] = mapped_column(Text, nullable=False)
    detection_method: Mapped[str] = mapped_column(
        String(50), nullable=False, default="statistical_analysis"
    )
    nudge_template_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    nudge_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    nudge_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    suggested_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class BiasNudgeTemplate(Base):
    """Coaching messages per (bias_type, severity); company_id NULL is the global fallback."""

    __tablename__ = "bias_nudge_templates"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    company_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    bias_type: Mapped[str] = mapped_column(String(32), nullable=False)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    nudge_title: Mapped[str] = mapped_column(Text, nullable=False)
    nudge_message: Mapped[str] = mapped_column(Text, nullable=False)
    suggested_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    educational_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AiExplainabilityRecord(Base):
    """Audit record summarizing one automated decision run."""

    __tablename__ = "ai_explainability_records"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    company_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    function_name: Mapped[str] = mapped_column(String(100), nullable=False)
    decision_type: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    input_summary: Mapped[dict] = mapped_column(JSONType, nullable=False)
    output_summary: Mapped[dict] = mapped_column(JSONType, nullable=False)
    weight_breakdown: Mapped[dict] = mapped_column(JSONType, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    human_review_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Notification(Base):
    """User notifications - written here, read by the app."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    user_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
