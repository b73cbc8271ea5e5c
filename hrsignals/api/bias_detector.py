"""Enhanced bias detector endpoint."""

import logging
from collections import Counter
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrsignals.api.preflight import preflight_response
from hrsignals.database import get_db
from hrsignals.engine.bias_detector import (
    INSUFFICIENT_SAMPLE_MESSAGE,
    detect_patterns,
    has_sufficient_sample,
    summarize_severity,
)
from hrsignals.engine.nudges import build_nudge
from hrsignals.engine.thresholds import DEFAULT_DETECTOR_CONFIG
from hrsignals.schemas.bias import (
    BiasDetectionRequest,
    BiasDetectionResponse,
    BiasPattern,
    EnrichedPattern,
    InsufficientSampleResponse,
)
from hrsignals.storage.repositories import (
    create_bias_pattern,
    create_explainability_record,
    create_notification,
    get_nudge_template,
)
from hrsignals.utils.canonical import payload_hash

logger = logging.getLogger(__name__)

router = APIRouter()

FUNCTION_NAME = "enhanced-bias-detector"


async def _persist_pattern(
    db: AsyncSession, body: BiasDetectionRequest, pattern: BiasPattern
) -> EnrichedPattern:
    """Resolve the nudge and store the finding. A failed write leaves id unset."""
    template = await get_nudge_template(db, body.company_id, pattern.type, pattern.severity)
    nudge = build_nudge(pattern, template)
    pattern_id = None
    try:
        row = await create_bias_pattern(
            db, body.manager_id, body.company_id, body.cycle_id, pattern, nudge
        )
        await db.commit()
        pattern_id = row.id
    except SQLAlchemyError:
        logger.exception(
            "Failed to persist %s pattern for manager %s", pattern.type, body.manager_id
        )
        await db.rollback()
    return EnrichedPattern(**pattern.model_dump(), id=pattern_id, nudge=nudge)


async def _record_explainability(
    db: AsyncSession, body: BiasDetectionRequest, patterns: list[BiasPattern]
) -> None:
    """One audit row per run."""
    weights = DEFAULT_DETECTOR_CONFIG.explainability
    confidence = max(
        (p.confidence for p in patterns), default=DEFAULT_DETECTOR_CONFIG.default_confidence
    )
    try:
        await create_explainability_record(
            db,
            company_id=body.company_id,
            function_name=FUNCTION_NAME,
            decision_type="bias_pattern_detection",
            entity_type="manager",
            entity_id=body.manager_id,
            input_summary={
                "action": body.action,
                "cycle_id": body.cycle_id,
                "rating_count": len(body.ratings),
                "ratings_hash": payload_hash(
                    [r.model_dump(mode="json") for r in body.ratings]
                ),
            },
            output_summary={
                "pattern_count": len(patterns),
                "by_type": dict(Counter(p.type for p in patterns)),
                "by_severity": dict(Counter(p.severity for p in patterns)),
            },
            weight_breakdown=weights.model_dump(),
            confidence_score=confidence,
            human_review_required=any(p.severity == "high" for p in patterns),
        )
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to record explainability for manager %s", body.manager_id)
        await db.rollback()


async def _notify_manager(
    db: AsyncSession, body: BiasDetectionRequest, patterns: list[BiasPattern]
) -> None:
    """Alert the manager when any high-severity pattern was found."""
    high = [p for p in patterns if p.severity == "high"]
    if not high:
        return
    types = ", ".join(sorted({p.type.replace("_", " ") for p in high}))
    try:
        await create_notification(
            db,
            user_id=body.manager_id,
            title=f"{len(high)} high-severity rating pattern(s) detected",
            message=f"Review your recent ratings for possible {types} bias.",
            type="bias_nudge",
        )
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to notify manager %s", body.manager_id)
        await db.rollback()


@router.post(
    "/enhanced-bias-detector",
    response_model=BiasDetectionResponse | InsufficientSampleResponse,
)
async def enhanced_bias_detector(
    body: BiasDetectionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """
    Run the statistical bias detectors selected by action over a manager's rating batch.
    Every pattern is persisted with its coaching nudge; the run is recorded for audit.
    """
    if not has_sufficient_sample(body.ratings):
        logger.info(
            "Skipping bias analysis for manager %s: %d ratings",
            body.manager_id,
            len(body.ratings),
        )
        return InsufficientSampleResponse(
            message=INSUFFICIENT_SAMPLE_MESSAGE.format(
                minimum=DEFAULT_DETECTOR_CONFIG.minimum_sample_size
            )
        )

    patterns = detect_patterns(body.ratings, body.action)
    logger.info(
        "Detected %d bias patterns for manager %s (%s)",
        len(patterns),
        body.manager_id,
        body.action,
    )

    enriched = [await _persist_pattern(db, body, pattern) for pattern in patterns]
    await _record_explainability(db, body, patterns)
    await _notify_manager(db, body, patterns)

    return BiasDetectionResponse(patterns=enriched, summary=summarize_severity(patterns))


@router.options("/enhanced-bias-detector", include_in_schema=False)
async def enhanced_bias_detector_options():
    return preflight_response()
