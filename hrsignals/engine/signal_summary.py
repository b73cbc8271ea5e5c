"""Strengths / development-areas rollup over an employee's current signals."""

import statistics
from collections import defaultdict
from collections.abc import Sequence

from hrsignals.engine.thresholds import DEFAULT_SIGNAL_CONFIG, SignalConfig
from hrsignals.schemas.signals import (
    SignalCategoryGroup,
    SignalEntry,
    SignalHighlight,
    SignalSummary,
    SummaryStats,
)


def summarize_signals(
    entries: Sequence[SignalEntry], config: SignalConfig = DEFAULT_SIGNAL_CONFIG
) -> SignalSummary:
    """Group by signal_category and compute overall score, confidence and highlights."""
    if not entries:
        return SignalSummary()

    grouped: dict[str, list[SignalEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.signal_category].append(entry)

    groups = [
        SignalCategoryGroup(
            category=category,
            average_value=round(statistics.fmean(e.signal_value for e in items), 2),
            signals=sorted(items, key=lambda e: e.name),
        )
        for category, items in sorted(grouped.items())
    ]

    def highlight(entry: SignalEntry) -> SignalHighlight:
        return SignalHighlight(code=entry.code, name=entry.name, value=entry.signal_value)

    ranked = sorted(entries, key=lambda e: e.signal_value, reverse=True)
    return SignalSummary(
        signals=groups,
        summary=SummaryStats(
            overall_score=round(statistics.fmean(e.signal_value for e in entries), 2),
            signal_count=len(entries),
            avg_confidence=round(statistics.fmean(e.confidence_score for e in entries), 3),
            strengths=[highlight(e) for e in ranked if e.signal_value >= config.strength_min],
            development_areas=[
                highlight(e) for e in reversed(ranked) if e.signal_value < config.development_max
            ],
        ),
    )
