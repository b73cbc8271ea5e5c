"""Talent signal aggregation over 360 feedback responses."""

import statistics
from collections import defaultdict
from collections.abc import Iterable, Sequence

from hrsignals.engine.thresholds import DEFAULT_SIGNAL_CONFIG, SignalConfig
from hrsignals.schemas.signals import RaterCategoryStats, ResponseEvidence, SignalAggregate


def map_question_to_signals(
    question_text: str,
    category_name: str = "",
    config: SignalConfig = DEFAULT_SIGNAL_CONFIG,
) -> list[str]:
    """
    Signal codes whose keywords appear (case-insensitive substring) in the
    question text or its category. Unmatched questions map to the fallback signal.
    """
    haystack = f"{question_text or ''} {category_name or ''}".lower()
    codes = [
        code
        for code, keywords in config.keywords.items()
        if any(keyword in haystack for keyword in keywords)
    ]
    return codes or [config.fallback_signal]


def meets_anonymity_threshold(completed_requests: int, anonymity_threshold: int) -> bool:
    """Subjects below the floor get no signal at all."""
    return completed_requests >= anonymity_threshold


def compute_confidence(
    response_count: int,
    category_count: int,
    anonymity_threshold: int,
    config: SignalConfig = DEFAULT_SIGNAL_CONFIG,
) -> float:
    """Volume relative to twice the anonymity floor, plus rater diversity."""
    volume = min(1.0, response_count / (2 * max(1, anonymity_threshold)))
    diversity = min(1.0, category_count / config.diversity_target)
    return config.volume_weight * volume + config.diversity_weight * diversity


def compute_bias_risk(
    breakdown: dict[str, RaterCategoryStats],
    overall_mean: float,
    config: SignalConfig = DEFAULT_SIGNAL_CONFIG,
) -> tuple[str, list[str]]:
    """Risk level from the largest category deviation, plus human-readable factors."""
    factors: list[str] = []
    max_deviation = 0.0
    for category, stats in breakdown.items():
        deviation = abs(stats.average - overall_mean)
        max_deviation = max(max_deviation, deviation)
        if deviation > config.bias_factor_deviation:
            factors.append(
                f"{category} ratings deviate {deviation:.1f} points from the overall mean"
            )
        if stats.rater_count == 1:
            factors.append(f"{category}: limited perspective (single rater)")

    if max_deviation > config.bias_high_deviation:
        level = "high"
    elif max_deviation > config.bias_medium_deviation:
        level = "medium"
    else:
        level = "low"
    return level, factors


def _rater_breakdown(responses: Sequence[ResponseEvidence]) -> dict[str, RaterCategoryStats]:
    ratings: dict[str, list[float]] = defaultdict(list)
    raters: dict[str, set[str]] = defaultdict(set)
    for r in responses:
        ratings[r.rater_category].append(r.rating_value)
        raters[r.rater_category].add(r.rater_id)
    return {
        category: RaterCategoryStats(
            average=round(statistics.fmean(values), 3),
            count=len(values),
            rater_count=len(raters[category]),
        )
        for category, values in ratings.items()
    }


def aggregate_signal(
    signal_code: str,
    responses: Sequence[ResponseEvidence],
    anonymity_threshold: int,
    config: SignalConfig = DEFAULT_SIGNAL_CONFIG,
) -> SignalAggregate:
    """Score one signal for one employee from the responses mapped to it."""
    weighted = [r.rating_value * r.rater_weight for r in responses]
    unweighted = [r.rating_value for r in responses]
    mean = statistics.fmean(weighted)
    normalized = max(0.0, min(100.0, (mean / config.scale_max) * 100))

    breakdown = _rater_breakdown(responses)
    overall_mean = statistics.fmean(unweighted)
    level, factors = compute_bias_risk(breakdown, overall_mean, config)

    return SignalAggregate(
        signal_code=signal_code,
        raw_score=round(mean, 3),
        normalized_score=round(normalized, 2),
        confidence_score=round(
            compute_confidence(len(responses), len(breakdown), anonymity_threshold, config), 3
        ),
        bias_risk_level=level,
        bias_factors=factors,
        evidence_count=len(responses),
        evidence_summary={
            "response_count": len(responses),
            "rater_count": len({r.rater_id for r in responses}),
            "rater_categories": sorted(breakdown),
            "average_rating": round(overall_mean, 3),
        },
        rater_breakdown=breakdown,
        response_ids=[r.response_id for r in responses],
    )


def aggregate_signals(
    responses: Iterable[ResponseEvidence],
    anonymity_threshold: int,
    config: SignalConfig = DEFAULT_SIGNAL_CONFIG,
) -> list[SignalAggregate]:
    """Map every response to its signals and score each signal with at least one response."""
    by_signal: dict[str, list[ResponseEvidence]] = defaultdict(list)
    for response in responses:
        for code in map_question_to_signals(
            response.question_text, response.question_category, config
        ):
            by_signal[code].append(response)

    return [
        aggregate_signal(code, grouped, anonymity_threshold, config)
        for code, grouped in by_signal.items()
    ]


def evidence_weights(evidence_count: int) -> list[float]:
    """Equal contribution per response; sums to 1."""
    if evidence_count <= 0:
        return []
    return [1 / evidence_count] * evidence_count
