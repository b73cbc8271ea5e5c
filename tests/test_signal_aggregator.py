"""Unit tests for talent signal aggregation."""

import pytest

from hrsignals.engine.signal_aggregator import (
    aggregate_signal,
    aggregate_signals,
    compute_bias_risk,
    compute_confidence,
    evidence_weights,
    map_question_to_signals,
    meets_anonymity_threshold,
)
from hrsignals.engine.thresholds import SignalConfig
from hrsignals.schemas.signals import RaterCategoryStats, ResponseEvidence


def _response(response_id, rater_id, rating, category="Peer", weight=1.0, text="Sets a clear direction"):
    return ResponseEvidence(
        response_id=response_id,
        rater_id=rater_id,
        rating_value=rating,
        question_text=text,
        question_category="Leadership",
        rater_category=category,
        rater_weight=weight,
    )


def test_question_maps_to_keyword_signal():
    """Keyword in the question text selects the signal."""
    assert map_question_to_signals("How well does this person mentor others?") == [
        "people_development"
    ]


def test_question_category_is_matched():
    """Category name participates in matching."""
    assert map_question_to_signals("Sets a clear direction", "Leadership") == [
        "leadership_consistency"
    ]


def test_question_can_map_to_several_signals():
    """One question can feed several signals."""
    codes = map_question_to_signals("Works with the team to communicate priorities")
    assert "collaboration" in codes
    assert "communication" in codes
    assert "strategic_thinking" in codes


def test_unmatched_question_falls_back_to_general():
    """No keyword hit maps to general."""
    assert map_question_to_signals("Overall effectiveness", "") == ["general"]


def test_mapping_is_case_insensitive():
    """Upper-case text still matches."""
    assert map_question_to_signals("CUSTOMER obsession") == ["customer_focus"]


def test_anonymity_threshold():
    """Floor is inclusive."""
    assert meets_anonymity_threshold(3, 3)
    assert not meets_anonymity_threshold(2, 3)


def test_confidence_volume_and_diversity():
    """0.6 * volume + 0.4 * diversity, both capped at 1."""
    assert compute_confidence(3, 2, 3) == pytest.approx(0.6 * 0.5 + 0.4 * 2 / 3)
    assert compute_confidence(100, 10, 3) == pytest.approx(1.0)
    assert compute_confidence(0, 0, 3) == 0


def test_confidence_zero_threshold_guarded():
    """Threshold of zero is treated as one."""
    assert compute_confidence(2, 3, 0) == pytest.approx(1.0)


def test_bias_risk_levels():
    """Largest category deviation picks the level."""
    breakdown = {
        "Peer": RaterCategoryStats(average=4.0, count=3, rater_count=3),
        "Manager": RaterCategoryStats(average=1.5, count=2, rater_count=2),
    }
    level, factors = compute_bias_risk(breakdown, overall_mean=3.6)
    assert level == "high"
    assert factors == ["Manager ratings deviate 2.1 points from the overall mean"]

    level, factors = compute_bias_risk(breakdown, overall_mean=2.9)
    assert level == "medium"
    assert factors == []

    close = {
        "Peer": RaterCategoryStats(average=4.0, count=3, rater_count=3),
        "Direct Report": RaterCategoryStats(average=3.5, count=2, rater_count=2),
    }
    level, factors = compute_bias_risk(close, overall_mean=3.8)
    assert level == "low"
    assert factors == []


def test_single_rater_category_flagged():
    """One rater in a category is a limited perspective."""
    breakdown = {"Manager": RaterCategoryStats(average=4.0, count=2, rater_count=1)}
    level, factors = compute_bias_risk(breakdown, overall_mean=4.0)
    assert level == "low"
    assert factors == ["Manager: limited perspective (single rater)"]


def test_aggregate_signal_scores():
    """Weighted mean, normalized to 0-100, with rater breakdown."""
    responses = [
        _response("r1", "p1", 4),
        _response("r2", "p2", 5),
        _response("r3", "m1", 4, category="Manager"),
    ]
    agg = aggregate_signal("leadership_consistency", responses, anonymity_threshold=3)
    assert agg.raw_score == pytest.approx(4.333)
    assert agg.normalized_score == pytest.approx(86.67)
    assert agg.confidence_score == pytest.approx(0.567)
    assert agg.evidence_count == 3
    assert agg.bias_risk_level == "low"
    assert agg.rater_breakdown["Peer"].average == 4.5
    assert agg.rater_breakdown["Peer"].rater_count == 2
    assert agg.rater_breakdown["Manager"].rater_count == 1
    assert agg.bias_factors == ["Manager: limited perspective (single rater)"]
    assert agg.response_ids == ["r1", "r2", "r3"]
    assert agg.evidence_summary["rater_categories"] == ["Manager", "Peer"]


def test_aggregate_signal_applies_weights_and_clamps():
    """Rater weight above 1 cannot push the normalized score past 100."""
    responses = [_response(f"r{i}", f"p{i}", 5, weight=1.5) for i in range(3)]
    agg = aggregate_signal("leadership_consistency", responses, anonymity_threshold=3)
    assert agg.raw_score == pytest.approx(7.5)
    assert agg.normalized_score == 100.0


def test_aggregate_signals_groups_by_code():
    """Each response feeds every signal its question maps to."""
    responses = [
        _response("r1", "p1", 4),
        _response("r2", "p1", 3, text="Overall effectiveness"),
    ]
    aggregates = {a.signal_code: a for a in aggregate_signals(responses, anonymity_threshold=3)}
    assert set(aggregates) == {"leadership_consistency"}
    assert aggregates["leadership_consistency"].evidence_count == 2

    plain = [
        ResponseEvidence(response_id="r3", rater_id="p1", rating_value=3, question_text="Overall")
    ]
    assert [a.signal_code for a in aggregate_signals(plain, 3)] == ["general"]


def test_custom_keyword_config():
    """Taxonomy is injectable."""
    config = SignalConfig(keywords={"grit": ("persever",)})
    assert map_question_to_signals("Perseveres under pressure", config=config) == ["grit"]
    assert map_question_to_signals("Sets direction", config=config) == ["general"]


@pytest.mark.parametrize("count", [1, 3, 7])
def test_evidence_weights_sum_to_one(count):
    """Equal contribution weights."""
    weights = evidence_weights(count)
    assert len(weights) == count
    assert sum(weights) == pytest.approx(1.0)


def test_evidence_weights_empty():
    assert evidence_weights(0) == []
