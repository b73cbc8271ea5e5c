"""360 feedback models (read-only here, except cycle processing status)."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hrsignals.database import Base


class Feedback360Cycle(Base):
    """Review cycle with its anonymity floor."""

    __tablename__ = "feedback_360_cycles"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    company_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    anonymity_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True, default=3)
    signal_processing_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    signals_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Feedback360RaterCategory(Base):
    """Rater relationship (peer, manager, direct report...) with aggregation weight."""

    __tablename__ = "feedback_360_rater_categories"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    company_id: Mapped[str | None] = mapped_column(Uuid(as_uuid=False), nullable=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True, default=1.0)


class Feedback360Request(Base):
    """One rater asked to review one subject within a cycle."""

    __tablename__ = "feedback_360_requests"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    cycle_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("feedback_360_cycles.id"), nullable=False
    )
    subject_employee_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    rater_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    rater_category_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("feedback_360_rater_categories.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    rater_category: Mapped[Feedback360RaterCategory | None] = relationship(lazy="joined")


class Feedback360Question(Base):
    """Question text and competency category."""

    __tablename__ = "feedback_360_questions"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)


class Feedback360Response(Base):
    """Rating given by a rater for one question."""

    __tablename__ = "feedback_360_responses"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    request_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("feedback_360_requests.id"), nullable=False
    )
    question_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("feedback_360_questions.id"), nullable=False
    )
    rating_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    question: Mapped[Feedback360Question] = relationship(lazy="joined")
