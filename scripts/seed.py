#!/usr/bin/env python3
"""
Seed script: global talent signal definitions, bias nudge templates and rater categories.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys
from uuid import uuid4

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from hrsignals.database import get_engine_url_and_connect_args
from hrsignals.engine.thresholds import GENERAL_SIGNAL, SIGNAL_KEYWORDS
from hrsignals.models import (
    BiasNudgeTemplate,
    Feedback360RaterCategory,
    TalentSignalDefinition,
)

SIGNAL_DEFINITIONS = {
    "leadership_consistency": ("Leadership Consistency", "leadership", "Sets direction and leads predictably"),
    "collaboration": ("Collaboration", "interpersonal", "Works effectively with others"),
    "communication": ("Communication", "interpersonal", "Shares information clearly and listens"),
    "people_development": ("People Development", "leadership", "Coaches and grows others"),
    "strategic_thinking": ("Strategic Thinking", "strategic", "Plans for the long term and prioritizes"),
    "technical_excellence": ("Technical Excellence", "execution", "Depth of expertise and quality of work"),
    "customer_focus": ("Customer Focus", "execution", "Serves customers and stakeholders"),
    "values_alignment": ("Values Alignment", "culture", "Acts with integrity and trust"),
    "adaptability": ("Adaptability", "culture", "Handles change and innovates"),
    GENERAL_SIGNAL: ("General Performance", "general", "Overall effectiveness"),
}

NUDGE_TEMPLATES = [
    ("leniency", "high", "Your ratings are well above the norm",
     "Most of your team received top ratings. Check each one against the written criteria.",
     "Re-read the rating rubric and adjust any score you cannot tie to evidence"),
    ("leniency", "medium", "Your ratings skew high",
     "Your average rating is above the expected range.",
     "Compare your top ratings with peers in calibration"),
    ("severity", "high", "Your ratings are well below the norm",
     "Most of your team received low ratings. Check whether the bar you apply matches the rubric.",
     "Review low ratings with HR before finalizing"),
    ("severity", "medium", "Your ratings skew low",
     "Your average rating is below the expected range.",
     "Note a concrete example for each low score"),
    ("central_tendency", "high", "Your ratings cluster in the middle",
     "Nearly every rating sits mid-scale, which hides real differences in performance.",
     "Identify your strongest and weakest performer and rate them first"),
    ("halo", "medium", "One strong impression may be shaping the whole review",
     "Every dimension received nearly the same high score.",
     "Rate each dimension separately with its own evidence"),
    ("horn", "medium", "One weak impression may be shaping the whole review",
     "Every dimension received nearly the same low score.",
     "Look for at least one dimension where the employee did well"),
    ("recency", "low", "Reviews were completed in a short window",
     "Many reviews were written within a couple of days; recent events may dominate.",
     "Check notes from the whole review period"),
    ("contrast", "low", "Ratings swing between consecutive reviews",
     "Consecutive employees often received very different ratings.",
     "Rate against the rubric, not against the previous employee"),
]

RATER_CATEGORIES = [
    ("Manager", "manager", 1.0),
    ("Peer", "peer", 1.0),
    ("Direct Report", "direct_report", 1.0),
    ("Self", "self", 0.5),
    ("External", "external", 0.8),
]


async def seed():
    db_url, connect_args = get_engine_url_and_connect_args()
    engine = create_async_engine(db_url, connect_args=connect_args)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        result = await session.execute(
            select(TalentSignalDefinition.code).where(TalentSignalDefinition.company_id.is_(None))
        )
        existing = set(result.scalars().all())
        missing = [code for code in [*SIGNAL_KEYWORDS, GENERAL_SIGNAL] if code not in existing]
        for code in missing:
            name, category, description = SIGNAL_DEFINITIONS[code]
            session.add(
                TalentSignalDefinition(
                    id=str(uuid4()),
                    company_id=None,
                    code=code,
                    name=name,
                    description=description,
                    signal_category=category,
                    is_active=True,
                )
            )
        await session.commit()
        print(f"Signal definitions: {len(missing)} added, {len(existing)} already present.")

        result = await session.execute(
            select(BiasNudgeTemplate.bias_type, BiasNudgeTemplate.severity).where(
                BiasNudgeTemplate.company_id.is_(None)
            )
        )
        existing_templates = {tuple(row) for row in result.all()}
        added = 0
        for bias_type, severity, title, message, action in NUDGE_TEMPLATES:
            if (bias_type, severity) in existing_templates:
                continue
            session.add(
                BiasNudgeTemplate(
                    id=str(uuid4()),
                    company_id=None,
                    bias_type=bias_type,
                    severity=severity,
                    nudge_title=title,
                    nudge_message=message,
                    suggested_action=action,
                    is_active=True,
                )
            )
            added += 1
        await session.commit()
        print(f"Nudge templates: {added} added.")

        result = await session.execute(
            select(Feedback360RaterCategory.code).where(
                Feedback360RaterCategory.company_id.is_(None)
            )
        )
        existing_categories = set(result.scalars().all())
        added = 0
        for name, code, weight in RATER_CATEGORIES:
            if code in existing_categories:
                continue
            session.add(
                Feedback360RaterCategory(
                    id=str(uuid4()), company_id=None, name=name, code=code, weight=weight
                )
            )
            added += 1
        await session.commit()
        print(f"Rater categories: {added} added.")

    await engine.dispose()
    print("Seed complete!")
    print("Example: curl -X POST http://localhost:8000/functions/v1/feedback-signal-processor \\")
    print('  -H "Content-Type: application/json" \\')
    print('  -d \'{"action":"get_signal_summary","companyId":"<company uuid>","employeeId":"<employee uuid>"}\'')


if __name__ == "__main__":
    asyncio.run(seed())
