"""Talent signal definition, snapshot and evidence models."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from hrsignals.database import Base, JSONType


class TalentSignalDefinition(Base):
    """Signal taxonomy entry; company_id NULL is the global definition."""

    __tablename__ = "talent_signal_definitions"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    company_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    signal_category: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TalentSignalSnapshot(Base):
    """Versioned signal value - append-only, one is_current row per (employee, signal, cycle)."""

    __tablename__ = "talent_signal_snapshots"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    employee_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    company_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    signal_definition_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("talent_signal_definitions.id"), nullable=False
    )
    source_cycle_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    snapshot_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    signal_value: Mapped[float] = mapped_column(Float, nullable=False)
    raw_score: Mapped[float] = mapped_column(Float, nullable=False)
    normalized_score: Mapped[float] = mapped_column(Float, nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False)
    bias_risk_level: Mapped[str] = mapped_column(String(16), nullable=False, default="low")
    bias_factors: Mapped[list] = mapped_column(JSONType, nullable=False)
    evidence_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    evidence_summary: Mapped[dict] = mapped_column(JSONType, nullable=False)
    rater_breakdown: Mapped[dict] = mapped_column(JSONType, nullable=False)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index(
            "uq_talent_signal_snapshots_current",
            "employee_id",
            "signal_definition_id",
            "source_cycle_id",
            unique=True,
            postgresql_where=text("is_current"),
            sqlite_where=text("is_current = 1"),
        ),
    )


class SignalEvidenceLink(Base):
    """Back-reference from a snapshot to a raw response that produced it."""

    __tablename__ = "signal_evidence_links"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    snapshot_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("talent_signal_snapshots.id"), nullable=False
    )
    source_table: Mapped[str] = mapped_column(String(64), nullable=False)
    source_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    contribution_weight: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
