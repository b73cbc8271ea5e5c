"""Coaching nudge construction for detected bias patterns."""

from hrsignals.models import BiasNudgeTemplate
from hrsignals.schemas.bias import BiasPattern, Nudge

FALLBACK_TITLES = {
    "leniency": "Your ratings skew high",
    "severity": "Your ratings skew low",
    "central_tendency": "Your ratings cluster in the middle",
    "halo": "One strong impression may be shaping the whole review",
    "horn": "One weak impression may be shaping the whole review",
    "recency": "Reviews were completed in a short window",
    "contrast": "Ratings swing between consecutive reviews",
}


def build_nudge(pattern: BiasPattern, template: BiasNudgeTemplate | None) -> Nudge:
    """Nudge from the template, or from the pattern's own description when none exists."""
    if template is None:
        return Nudge(
            title=FALLBACK_TITLES.get(pattern.type, "Rating pattern detected"),
            message=pattern.description,
        )
    return Nudge(
        template_id=template.id,
        title=template.nudge_title,
        message=template.nudge_message,
        suggested_action=template.suggested_action,
        educational_content=template.educational_content,
    )
