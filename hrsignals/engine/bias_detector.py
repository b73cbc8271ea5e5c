"""Rater-bias detectors - statistical checks over one manager's rating batch.

Every detector is pure: it reads the supplied batch and returns zero or more
BiasPattern findings. Nothing here touches the database.
"""

import statistics
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from hrsignals.engine.thresholds import DEFAULT_DETECTOR_CONFIG, DetectorConfig
from hrsignals.schemas.bias import AffectedEmployee, BiasPattern, RatingSample, SeveritySummary

INSUFFICIENT_SAMPLE_MESSAGE = "Insufficient data for bias analysis (minimum {minimum} ratings required)"


def _affected(rating: RatingSample, impact: str) -> AffectedEmployee:
    return AffectedEmployee(
        employee_id=rating.employee_id,
        employee_name=rating.employee_name,
        impact=impact,
    )


def has_sufficient_sample(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> bool:
    """True when the batch is large enough for any detector to run."""
    return len(ratings) >= config.minimum_sample_size


def detect_leniency_severity(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> list[BiasPattern]:
    """Batch mean too high (leniency) or too low (severity). At most one fires."""
    if not ratings:
        return []
    t = config.distribution
    mean = statistics.fmean(r.overall_score for r in ratings)

    if mean > t.leniency_mean:
        if mean > t.leniency_high:
            severity = "high"
        elif mean > t.leniency_medium:
            severity = "medium"
        else:
            severity = "low"
        affected = [
            _affected(r, f"Rating may be inflated (overall {r.overall_score:.2f})")
            for r in ratings
            if r.overall_score >= t.leniency_affected_min
        ]
        return [
            BiasPattern(
                type="leniency",
                severity=severity,
                confidence=min(
                    t.confidence_cap,
                    t.confidence_base + (mean - t.leniency_mean) * t.confidence_slope,
                ),
                evidence_count=len(ratings),
                affected_employees=affected,
                description=(
                    f"Average rating of {mean:.2f} is above the expected range; "
                    f"{len(affected)} of {len(ratings)} employees rated 4 or higher"
                ),
            )
        ]

    if mean < t.severity_mean:
        if mean < t.severity_high:
            severity = "high"
        elif mean < t.severity_medium:
            severity = "medium"
        else:
            severity = "low"
        affected = [
            _affected(r, f"Rating may be deflated (overall {r.overall_score:.2f})")
            for r in ratings
            if r.overall_score <= t.severity_affected_max
        ]
        return [
            BiasPattern(
                type="severity",
                severity=severity,
                confidence=min(
                    t.confidence_cap,
                    t.confidence_base + (t.severity_mean - mean) * t.confidence_slope,
                ),
                evidence_count=len(ratings),
                affected_employees=affected,
                description=(
                    f"Average rating of {mean:.2f} is below the expected range; "
                    f"{len(affected)} of {len(ratings)} employees rated 3 or lower"
                ),
            )
        ]

    return []


def detect_central_tendency(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> list[BiasPattern]:
    """Low spread with most ratings in the middle band."""
    if not ratings:
        return []
    t = config.central_tendency
    scores = [r.overall_score for r in ratings]
    std = statistics.pstdev(scores)
    mean = statistics.fmean(scores)
    mid_range = sum(1 for s in scores if t.mid_low <= s <= t.mid_high) / len(scores)

    if std < t.max_std and mid_range > t.min_mid_fraction:
        return [
            BiasPattern(
                type="central_tendency",
                severity="high" if std < t.high_std else "medium",
                confidence=min(t.confidence_cap, t.confidence_base + (t.max_std - std) * t.confidence_slope),
                evidence_count=len(ratings),
                affected_employees=[
                    _affected(r, "Rating clustered in the middle of the scale")
                    for r in ratings
                    if t.mid_low <= r.overall_score <= t.mid_high
                ],
                description=(
                    f"{mid_range:.0%} of ratings fall between {t.mid_low} and {t.mid_high} "
                    f"(mean {mean:.2f}, standard deviation {std:.2f})"
                ),
            )
        ]
    return []


def detect_halo_horn(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> list[BiasPattern]:
    """Per review: near-identical scores across dimensions. One pattern per qualifying review."""
    t = config.halo_horn
    patterns: list[BiasPattern] = []
    for rating in ratings:
        values = [s.score for s in rating.scores]
        if len(values) < t.min_scored_dimensions:
            continue
        mean = statistics.fmean(values)
        std = statistics.pstdev(values)
        if std >= t.max_std or len(values) < t.min_dimensions:
            continue

        if mean >= t.halo_mean:
            bias_type, direction = "halo", "high"
        elif mean <= t.horn_mean:
            bias_type, direction = "horn", "low"
        else:
            continue

        patterns.append(
            BiasPattern(
                type=bias_type,
                severity="medium" if std < t.medium_std else "low",
                confidence=min(t.confidence_cap, t.confidence_base + (t.max_std - std) * t.confidence_slope),
                evidence_count=len(values),
                affected_employees=[
                    _affected(
                        rating,
                        f"Uniformly {direction} scores across {len(values)} dimensions "
                        f"(mean {mean:.2f}, std {std:.2f})",
                    )
                ],
                description=(
                    f"{rating.employee_name or rating.employee_id} received uniformly {direction} "
                    f"ratings on every dimension, suggesting a single impression drove the review"
                ),
            )
        )
    return patterns


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def detect_recency(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> list[BiasPattern]:
    """Large batch reviewed within a very short window."""
    t = config.recency
    dates = sorted(_as_utc(r.review_date) for r in ratings if r.review_date is not None)
    if len(dates) < t.min_dated:
        return []
    span_days = (dates[-1] - dates[0]).total_seconds() / 86400
    if span_days < t.max_span_days and len(ratings) > t.min_batch_size:
        return [
            BiasPattern(
                type="recency",
                severity="low",
                confidence=t.confidence,
                evidence_count=len(dates),
                affected_employees=[_affected(r, "review completed rapidly") for r in ratings],
                description=(
                    f"{len(ratings)} reviews were completed within {span_days:.1f} days; "
                    f"recent events may be over-weighted"
                ),
            )
        ]
    return []


def detect_contrast(
    ratings: Sequence[RatingSample], config: DetectorConfig = DEFAULT_DETECTOR_CONFIG
) -> list[BiasPattern]:
    """Frequent large swings between consecutive reviews, in submission order."""
    t = config.contrast
    if len(ratings) < t.min_ratings:
        return []
    swings = sum(
        1
        for prev, cur in zip(ratings, ratings[1:])
        if abs(cur.overall_score - prev.overall_score) >= t.swing
    )
    swing_rate = swings / (len(ratings) - 1)
    if swing_rate > t.max_swing_rate:
        return [
            BiasPattern(
                type="contrast",
                severity="low",
                confidence=t.confidence,
                evidence_count=swings,
                affected_employees=[],
                description=(
                    f"{swings} of {len(ratings) - 1} consecutive reviews differ by "
                    f"{t.swing} points or more; ratings may be relative to the previous employee"
                ),
            )
        ]
    return []


Detector = Callable[[Sequence[RatingSample], DetectorConfig], list[BiasPattern]]

ALL_DETECTORS: tuple[Detector, ...] = (
    detect_recency,
    detect_leniency_severity,
    detect_central_tendency,
    detect_halo_horn,
    detect_contrast,
)

ACTION_DETECTORS: dict[str, tuple[Detector, ...]] = {
    "detect_recency_bias": (detect_recency,),
    "detect_distribution_bias": (detect_leniency_severity, detect_central_tendency),
    "detect_halo_horn": (detect_halo_horn,),
}


def detect_patterns(
    ratings: Sequence[RatingSample],
    action: str = "analyze_manager_patterns",
    config: DetectorConfig = DEFAULT_DETECTOR_CONFIG,
) -> list[BiasPattern]:
    """
    Run the detectors selected by action and union their findings.
    Unlisted actions run every detector. Returns [] below the minimum sample size.
    """
    if not has_sufficient_sample(ratings, config):
        return []
    patterns: list[BiasPattern] = []
    for detector in ACTION_DETECTORS.get(action, ALL_DETECTORS):
        patterns.extend(detector(ratings, config))
    return patterns


def summarize_severity(patterns: Sequence[BiasPattern]) -> SeveritySummary:
    """Count patterns by severity."""
    return SeveritySummary(
        total_patterns=len(patterns),
        high_severity=sum(1 for p in patterns if p.severity == "high"),
        medium_severity=sum(1 for p in patterns if p.severity == "medium"),
        low_severity=sum(1 for p in patterns if p.severity == "low"),
    )
