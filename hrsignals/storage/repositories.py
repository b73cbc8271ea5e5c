"""Repository functions for bias findings, nudges, 360 feedback and talent signals."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.ext.asyncio import AsyncSession

from hrsignals.models import (
    AiExplainabilityRecord,
    BiasNudgeTemplate,
    Feedback360Cycle,
    Feedback360Request,
    Feedback360Response,
    ManagerBiasPattern,
    Notification,
    SignalEvidenceLink,
    TalentSignalDefinition,
    TalentSignalSnapshot,
)
from hrsignals.schemas.bias import BiasPattern, Nudge
from hrsignals.schemas.signals import SignalAggregate

EVIDENCE_SOURCE_TABLE = "feedback_360_responses"


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def get_nudge_template(
    db: AsyncSession, company_id: str, bias_type: str, severity: str
) -> BiasNudgeTemplate | None:
    """Active template for (bias_type, severity): company-specific first, then global."""
    for company_filter in (
        BiasNudgeTemplate.company_id == company_id,
        BiasNudgeTemplate.company_id.is_(None),
    ):
        result = await db.execute(
            select(BiasNudgeTemplate)
            .where(
                company_filter,
                BiasNudgeTemplate.bias_type == bias_type,
                BiasNudgeTemplate.severity == severity,
                BiasNudgeTemplate.is_active.is_(True),
            )
            .limit(1)
        )
        template = result.scalars().first()
        if template:
            return template
    return None


async def create_bias_pattern(
    db: AsyncSession,
    manager_id: str,
    company_id: str,
    cycle_id: str | None,
    pattern: BiasPattern,
    nudge: Nudge,
) -> ManagerBiasPattern:
    """Persist one detected pattern with its nudge."""
    row = ManagerBiasPattern(
        id=str(uuid4()),
        manager_id=manager_id,
        company_id=company_id,
        cycle_id=cycle_id,
        bias_type=pattern.type,
        severity=pattern.severity,
        confidence_score=pattern.confidence,
        evidence_count=pattern.evidence_count,
        affected_employees=[a.model_dump(by_alias=True) for a in pattern.affected_employees],
        pattern_description=pattern.description,
        detection_method="statistical_analysis",
        nudge_template_id=nudge.template_id,
        nudge_title=nudge.title,
        nudge_message=nudge.message,
        suggested_action=nudge.suggested_action,
        status="active",
        created_at=_now(),
    )
    db.add(row)
    await db.flush()
    return row


async def create_explainability_record(
    db: AsyncSession,
    company_id: str,
    function_name: str,
    decision_type: str,
    entity_type: str,
    entity_id: str,
    input_summary: dict,
    output_summary: dict,
    weight_breakdown: dict,
    confidence_score: float,
    human_review_required: bool,
) -> AiExplainabilityRecord:
    """Create explainability/audit record for one run."""
    record = AiExplainabilityRecord(
        id=str(uuid4()),
        company_id=company_id,
        function_name=function_name,
        decision_type=decision_type,
        entity_type=entity_type,
        entity_id=entity_id,
        input_summary=input_summary,
        output_summary=output_summary,
        weight_breakdown=weight_breakdown,
        confidence_score=confidence_score,
        human_review_required=human_review_required,
        created_at=_now(),
    )
    db.add(record)
    await db.flush()
    return record


async def create_notification(
    db: AsyncSession,
    user_id: str,
    title: str,
    message: str,
    type: str,
    link: str | None = None,
) -> Notification:
    """Queue an in-app notification."""
    notification = Notification(
        id=str(uuid4()),
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        link=link,
        is_read=False,
        created_at=_now(),
    )
    db.add(notification)
    await db.flush()
    return notification


async def get_cycle(db: AsyncSession, cycle_id: str, company_id: str) -> Feedback360Cycle | None:
    """Get cycle by ID (company-scoped)."""
    result = await db.execute(
        select(Feedback360Cycle).where(
            Feedback360Cycle.id == cycle_id,
            Feedback360Cycle.company_id == company_id,
        )
    )
    return result.scalar_one_or_none()


async def get_completed_requests(
    db: AsyncSession, cycle_id: str, employee_id: str | None = None
) -> list[Feedback360Request]:
    """Completed rater requests for a cycle, with rater category loaded."""
    query = select(Feedback360Request).where(
        Feedback360Request.cycle_id == cycle_id,
        Feedback360Request.status == "completed",
    )
    if employee_id:
        query = query.where(Feedback360Request.subject_employee_id == employee_id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_rating_responses(
    db: AsyncSession, request_ids: list[str]
) -> list[Feedback360Response]:
    """Responses carrying a rating for the given requests, with their question loaded."""
    if not request_ids:
        return []
    result = await db.execute(
        select(Feedback360Response).where(
            Feedback360Response.request_id.in_(request_ids),
            Feedback360Response.rating_value.is_not(None),
        )
    )
    return list(result.scalars().all())


async def get_signal_definitions(
    db: AsyncSession, company_id: str
) -> dict[str, TalentSignalDefinition]:
    """Active definitions by code; a company row overrides the global row of the same code."""
    result = await db.execute(
        select(TalentSignalDefinition).where(
            TalentSignalDefinition.is_active.is_(True),
            or_(
                TalentSignalDefinition.company_id == company_id,
                TalentSignalDefinition.company_id.is_(None),
            ),
        )
    )
    definitions: dict[str, TalentSignalDefinition] = {}
    for definition in result.scalars().all():
        existing = definitions.get(definition.code)
        if existing is None or (existing.company_id is None and definition.company_id is not None):
            definitions[definition.code] = definition
    return definitions


async def _lock_employee_cycle(db: AsyncSession, employee_id: str, cycle_id: str) -> None:
    """Serialize snapshot writers for one (employee, cycle) until the transaction ends."""
    if db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(
        text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
        {"key": f"{employee_id}:{cycle_id}"},
    )


async def save_signal_snapshot(
    db: AsyncSession,
    employee_id: str,
    company_id: str,
    signal_definition_id: str,
    cycle_id: str,
    aggregate: SignalAggregate,
    contribution_weights: list[float],
) -> TalentSignalSnapshot:
    """
    Retire the current snapshot for (employee, signal, cycle) and append the next version,
    then link every contributing response. Caller commits.
    """
    await _lock_employee_cycle(db, employee_id, cycle_id)
    now = _now()

    result = await db.execute(
        select(func.max(TalentSignalSnapshot.snapshot_version)).where(
            TalentSignalSnapshot.employee_id == employee_id,
            TalentSignalSnapshot.signal_definition_id == signal_definition_id,
            TalentSignalSnapshot.source_cycle_id == cycle_id,
        )
    )
    prior_version = result.scalar_one_or_none() or 0

    await db.execute(
        update(TalentSignalSnapshot)
        .where(
            TalentSignalSnapshot.employee_id == employee_id,
            TalentSignalSnapshot.signal_definition_id == signal_definition_id,
            TalentSignalSnapshot.source_cycle_id == cycle_id,
            TalentSignalSnapshot.is_current.is_(True),
        )
        .values(is_current=False, valid_until=now)
        .execution_options(synchronize_session=False)
    )

    snapshot = TalentSignalSnapshot(
        id=str(uuid4()),
        employee_id=employee_id,
        company_id=company_id,
        signal_definition_id=signal_definition_id,
        source_cycle_id=cycle_id,
        snapshot_version=prior_version + 1,
        signal_value=aggregate.normalized_score,
        raw_score=aggregate.raw_score,
        normalized_score=aggregate.normalized_score,
        confidence_score=aggregate.confidence_score,
        bias_risk_level=aggregate.bias_risk_level,
        bias_factors=aggregate.bias_factors,
        evidence_count=aggregate.evidence_count,
        evidence_summary=aggregate.evidence_summary,
        rater_breakdown={k: v.model_dump() for k, v in aggregate.rater_breakdown.items()},
        is_current=True,
        valid_from=now,
        valid_until=None,
        created_at=now,
    )
    db.add(snapshot)
    await db.flush()

    for response_id, weight in zip(aggregate.response_ids, contribution_weights):
        db.add(
            SignalEvidenceLink(
                id=str(uuid4()),
                snapshot_id=snapshot.id,
                source_table=EVIDENCE_SOURCE_TABLE,
                source_id=response_id,
                contribution_weight=weight,
                created_at=now,
            )
        )
    await db.flush()
    return snapshot


async def mark_cycle_signals_processed(db: AsyncSession, cycle_id: str) -> None:
    """Flag the cycle as having completed signal processing."""
    await db.execute(
        update(Feedback360Cycle)
        .where(Feedback360Cycle.id == cycle_id)
        .values(signal_processing_status="completed", signals_processed_at=_now())
        .execution_options(synchronize_session=False)
    )


async def get_current_snapshots(
    db: AsyncSession, employee_id: str, company_id: str
) -> list[tuple[TalentSignalSnapshot, TalentSignalDefinition]]:
    """Current snapshots for an employee joined with their definitions."""
    result = await db.execute(
        select(TalentSignalSnapshot, TalentSignalDefinition)
        .join(
            TalentSignalDefinition,
            TalentSignalDefinition.id == TalentSignalSnapshot.signal_definition_id,
        )
        .where(
            TalentSignalSnapshot.employee_id == employee_id,
            TalentSignalSnapshot.company_id == company_id,
            TalentSignalSnapshot.is_current.is_(True),
        )
    )
    return [(snapshot, definition) for snapshot, definition in result.all()]
