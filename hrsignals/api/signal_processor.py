"""Feedback signal processor endpoint."""

import logging
from collections import defaultdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrsignals.api.preflight import preflight_response
from hrsignals.config import settings
from hrsignals.database import get_db
from hrsignals.engine.signal_aggregator import (
    aggregate_signals,
    evidence_weights,
    meets_anonymity_threshold,
)
from hrsignals.engine.signal_summary import summarize_signals
from hrsignals.schemas.signals import (
    ProcessCycleRequest,
    ProcessEmployeeRequest,
    ProcessResult,
    RecalculateSignalsRequest,
    ResponseEvidence,
    SignalEntry,
    SignalProcessorRequest,
    SignalSummary,
    SignalSummaryRequest,
)
from hrsignals.storage.repositories import (
    get_completed_requests,
    get_current_snapshots,
    get_cycle,
    get_rating_responses,
    get_signal_definitions,
    mark_cycle_signals_processed,
    save_signal_snapshot,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _process_employee(
    db: AsyncSession,
    employee_id: str,
    raters: dict[str, tuple[str, str, float]],
    company_id: str,
    cycle_id: str,
    anonymity_threshold: int,
    definition_ids: dict[str, str],
) -> int:
    """Aggregate and store every signal for one subject. Returns snapshots written."""
    responses = await get_rating_responses(db, list(raters))
    evidence = []
    for response in responses:
        rater_id, category, weight = raters[response.request_id]
        evidence.append(
            ResponseEvidence(
                response_id=response.id,
                rater_id=rater_id,
                rating_value=response.rating_value,
                question_text=response.question.question_text if response.question else "",
                question_category=(response.question.category or "") if response.question else "",
                rater_category=category,
                rater_weight=weight,
            )
        )

    written = 0
    for aggregate in aggregate_signals(evidence, anonymity_threshold):
        definition_id = definition_ids.get(aggregate.signal_code)
        if definition_id is None:
            logger.warning("No active signal definition for %s, skipping", aggregate.signal_code)
            continue
        try:
            await save_signal_snapshot(
                db,
                employee_id=employee_id,
                company_id=company_id,
                signal_definition_id=definition_id,
                cycle_id=cycle_id,
                aggregate=aggregate,
                contribution_weights=evidence_weights(aggregate.evidence_count),
            )
            await db.commit()
            written += 1
        except SQLAlchemyError:
            logger.exception(
                "Failed to save %s snapshot for employee %s", aggregate.signal_code, employee_id
            )
            await db.rollback()
    return written


async def _process_cycle(
    db: AsyncSession,
    company_id: str,
    cycle_id: str,
    employee_id: str | None = None,
) -> ProcessResult:
    """
    Turn completed 360 requests into versioned talent signal snapshots.
    Subjects below the cycle's anonymity threshold are skipped without error.
    The cycle is marked processed only when it was processed as a whole.
    """
    cycle = await get_cycle(db, cycle_id, company_id)
    if not cycle:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cycle not found")
    anonymity_threshold = cycle.anonymity_threshold
    if anonymity_threshold is None:
        anonymity_threshold = settings.default_anonymity_threshold

    # Plain values only: a rollback below expires every loaded instance
    subjects: dict[str, dict[str, tuple[str, str, float]]] = defaultdict(dict)
    for request in await get_completed_requests(db, cycle_id, employee_id):
        category = request.rater_category
        weight = category.weight if category and category.weight is not None else 1.0
        subjects[request.subject_employee_id][request.id] = (
            request.rater_id,
            category.name if category else "unknown",
            weight,
        )
    definition_ids = {
        code: definition.id
        for code, definition in (await get_signal_definitions(db, company_id)).items()
    }

    processed: list[str] = []
    for subject_id, raters in subjects.items():
        if not meets_anonymity_threshold(len(raters), anonymity_threshold):
            logger.info(
                "Employee %s below anonymity threshold (%d < %d), skipping",
                subject_id,
                len(raters),
                anonymity_threshold,
            )
            continue
        written = await _process_employee(
            db, subject_id, raters, company_id, cycle_id, anonymity_threshold, definition_ids
        )
        if written:
            processed.append(subject_id)
        else:
            logger.warning(
                "Employee %s met the anonymity threshold but no signal snapshots were written",
                subject_id,
            )

    if employee_id is None:
        await mark_cycle_signals_processed(db, cycle_id)
        await db.commit()

    logger.info("Processed signals for %d employees in cycle %s", len(processed), cycle_id)
    return ProcessResult(processed=len(processed), employees=processed)


async def _signal_summary(db: AsyncSession, company_id: str, employee_id: str) -> SignalSummary:
    rows = await get_current_snapshots(db, employee_id, company_id)
    entries = [
        SignalEntry(
            code=definition.code,
            name=definition.name,
            signal_category=definition.signal_category,
            signal_value=snapshot.signal_value,
            confidence_score=snapshot.confidence_score,
            bias_risk_level=snapshot.bias_risk_level,
            snapshot_version=snapshot.snapshot_version,
            evidence_count=snapshot.evidence_count,
        )
        for snapshot, definition in rows
    ]
    return summarize_signals(entries)


@router.post("/feedback-signal-processor", response_model=ProcessResult | SignalSummary)
async def feedback_signal_processor(
    body: SignalProcessorRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Dispatch on action: process a cycle or employee, recalculate, or summarize signals."""
    if isinstance(body, ProcessCycleRequest):
        return await _process_cycle(db, body.company_id, body.cycle_id)
    if isinstance(body, ProcessEmployeeRequest):
        return await _process_cycle(db, body.company_id, body.cycle_id, body.employee_id)
    if isinstance(body, RecalculateSignalsRequest):
        logger.info(
            "Recalculating signals for cycle %s (force=%s)", body.cycle_id, body.force_recalculate
        )
        return await _process_cycle(db, body.company_id, body.cycle_id, body.employee_id)
    if isinstance(body, SignalSummaryRequest):
        return await _signal_summary(db, body.company_id, body.employee_id)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown action")


@router.options("/feedback-signal-processor", include_in_schema=False)
async def feedback_signal_processor_options():
    return preflight_response()
