"""Unit tests for the signal summary rollup."""

from hrsignals.engine.signal_summary import summarize_signals
from hrsignals.schemas.signals import SignalEntry


def _entry(code, value, category="leadership", confidence=0.5):
    return SignalEntry(
        code=code,
        name=code.replace("_", " ").title(),
        signal_category=category,
        signal_value=value,
        confidence_score=confidence,
        bias_risk_level="low",
        snapshot_version=1,
        evidence_count=3,
    )


def test_empty_summary_shape():
    """No current signals gives the fixed empty shape."""
    assert summarize_signals([]).model_dump() == {
        "signals": [],
        "summary": {
            "overall_score": None,
            "signal_count": 0,
            "avg_confidence": 0,
            "strengths": [],
            "development_areas": [],
        },
    }


def test_strengths_and_development_areas():
    """>= 80 is a strength, < 60 a development area, 60-80 neither."""
    entries = [
        _entry("leadership_consistency", 86.67, confidence=0.6),
        _entry("communication", 55.0, category="interpersonal", confidence=0.4),
        _entry("general", 66.67, category="general", confidence=0.5),
        _entry("collaboration", 92.0, category="interpersonal", confidence=0.5),
        _entry("adaptability", 40.0, category="general", confidence=0.5),
    ]
    result = summarize_signals(entries)

    assert [s.code for s in result.summary.strengths] == ["collaboration", "leadership_consistency"]
    assert [s.code for s in result.summary.development_areas] == ["adaptability", "communication"]
    assert result.summary.signal_count == 5
    assert result.summary.overall_score == round((86.67 + 55 + 66.67 + 92 + 40) / 5, 2)
    assert result.summary.avg_confidence == 0.5


def test_grouped_by_category():
    """Groups are sorted by category with a per-group average."""
    entries = [
        _entry("leadership_consistency", 80.0),
        _entry("collaboration", 70.0, category="interpersonal"),
        _entry("communication", 60.0, category="interpersonal"),
    ]
    result = summarize_signals(entries)

    assert [g.category for g in result.signals] == ["interpersonal", "leadership"]
    interpersonal = result.signals[0]
    assert interpersonal.average_value == 65.0
    assert [s.code for s in interpersonal.signals] == ["collaboration", "communication"]


def test_boundary_values():
    """Exactly 80 is a strength; exactly 60 is not a development area."""
    result = summarize_signals([_entry("a", 80.0), _entry("b", 60.0)])
    assert [s.code for s in result.summary.strengths] == ["a"]
    assert result.summary.development_areas == []
