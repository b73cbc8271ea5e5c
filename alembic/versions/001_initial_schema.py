"""Initial schema - bias findings, nudges, audit, 360 feedback, talent signals.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bias_nudge_templates",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("company_id", sa.UUID(), nullable=True),
        sa.Column("bias_type", sa.String(32), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("nudge_title", sa.Text(), nullable=False),
        sa.Column("nudge_message", sa.Text(), nullable=False),
        sa.Column("suggested_action", sa.Text(), nullable=True),
        sa.Column("educational_content", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index(
        "ix_bias_nudge_templates_lookup",
        "bias_nudge_templates",
        ["bias_type", "severity", "company_id"],
    )

    op.create_table(
        "manager_bias_patterns",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("manager_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("cycle_id", sa.UUID(), nullable=True),
        sa.Column("bias_type", sa.String(32), nullable=False),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=False),
        sa.Column("evidence_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("affected_employees", postgresql.JSONB(), nullable=False),
        sa.Column("pattern_description", sa.Text(), nullable=False),
        sa.Column(
            "detection_method", sa.String(50), nullable=False, server_default="statistical_analysis"
        ),
        sa.Column("nudge_template_id", sa.UUID(), nullable=True),
        sa.Column("nudge_title", sa.Text(), nullable=True),
        sa.Column("nudge_message", sa.Text(), nullable=True),
        sa.Column("suggested_action", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_manager_bias_patterns_manager",
        "manager_bias_patterns",
        ["company_id", "manager_id", "cycle_id"],
    )

    op.create_table(
        "ai_explainability_records",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("function_name", sa.String(100), nullable=False),
        sa.Column("decision_type", sa.String(100), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.UUID(), nullable=False),
        sa.Column("input_summary", postgresql.JSONB(), nullable=False),
        sa.Column("output_summary", postgresql.JSONB(), nullable=False),
        sa.Column("weight_breakdown", postgresql.JSONB(), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=False),
        sa.Column("human_review_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        "feedback_360_cycles",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("anonymity_threshold", sa.Integer(), nullable=True, server_default="3"),
        sa.Column("signal_processing_status", sa.String(20), nullable=True),
        sa.Column("signals_processed_at", sa.TIMESTAMP(timezone=True), nullable=True),
    )

    op.create_table(
        "feedback_360_rater_categories",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("company_id", sa.UUID(), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("weight", sa.Float(), nullable=True, server_default="1.0"),
    )

    op.create_table(
        "feedback_360_requests",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("cycle_id", sa.UUID(), sa.ForeignKey("feedback_360_cycles.id"), nullable=False),
        sa.Column("subject_employee_id", sa.UUID(), nullable=False),
        sa.Column("rater_id", sa.UUID(), nullable=False),
        sa.Column(
            "rater_category_id",
            sa.UUID(),
            sa.ForeignKey("feedback_360_rater_categories.id"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
    )
    op.create_index(
        "ix_feedback_360_requests_cycle_status",
        "feedback_360_requests",
        ["cycle_id", "status"],
    )

    op.create_table(
        "feedback_360_questions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
    )

    op.create_table(
        "feedback_360_responses",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "request_id", sa.UUID(), sa.ForeignKey("feedback_360_requests.id"), nullable=False
        ),
        sa.Column(
            "question_id", sa.UUID(), sa.ForeignKey("feedback_360_questions.id"), nullable=False
        ),
        sa.Column("rating_value", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
    )

    op.create_table(
        "talent_signal_definitions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("company_id", sa.UUID(), nullable=True),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("signal_category", sa.String(32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "talent_signal_snapshots",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("employee_id", sa.UUID(), nullable=False),
        sa.Column("company_id", sa.UUID(), nullable=False),
        sa.Column(
            "signal_definition_id",
            sa.UUID(),
            sa.ForeignKey("talent_signal_definitions.id"),
            nullable=False,
        ),
        sa.Column("source_cycle_id", sa.UUID(), nullable=True),
        sa.Column("snapshot_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("signal_value", sa.Float(), nullable=False),
        sa.Column("raw_score", sa.Float(), nullable=False),
        sa.Column("normalized_score", sa.Float(), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=False),
        sa.Column("bias_risk_level", sa.String(16), nullable=False, server_default="low"),
        sa.Column("bias_factors", postgresql.JSONB(), nullable=False),
        sa.Column("evidence_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("evidence_summary", postgresql.JSONB(), nullable=False),
        sa.Column("rater_breakdown", postgresql.JSONB(), nullable=False),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("valid_from", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("valid_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    # At most one current row per (employee, signal, cycle)
    op.create_index(
        "uq_talent_signal_snapshots_current",
        "talent_signal_snapshots",
        ["employee_id", "signal_definition_id", "source_cycle_id"],
        unique=True,
        postgresql_where=sa.text("is_current"),
    )

    op.create_table(
        "signal_evidence_links",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "snapshot_id", sa.UUID(), sa.ForeignKey("talent_signal_snapshots.id"), nullable=False
        ),
        sa.Column("source_table", sa.String(64), nullable=False),
        sa.Column("source_id", sa.UUID(), nullable=False),
        sa.Column("contribution_weight", sa.Float(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("signal_evidence_links")
    op.drop_index("uq_talent_signal_snapshots_current", table_name="talent_signal_snapshots")
    op.drop_table("talent_signal_snapshots")
    op.drop_table("talent_signal_definitions")
    op.drop_table("feedback_360_responses")
    op.drop_table("feedback_360_questions")
    op.drop_index("ix_feedback_360_requests_cycle_status", table_name="feedback_360_requests")
    op.drop_table("feedback_360_requests")
    op.drop_table("feedback_360_rater_categories")
    op.drop_table("feedback_360_cycles")
    op.drop_table("notifications")
    op.drop_table("ai_explainability_records")
    op.drop_index("ix_manager_bias_patterns_manager", table_name="manager_bias_patterns")
    op.drop_table("manager_bias_patterns")
    op.drop_index("ix_bias_nudge_templates_lookup", table_name="bias_nudge_templates")
    op.drop_table("bias_nudge_templates")
