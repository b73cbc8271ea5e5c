"""Database models."""

from hrsignals.models.bias import (
    AiExplainabilityRecord,
    BiasNudgeTemplate,
    ManagerBiasPattern,
    Notification,
)
from hrsignals.models.feedback import (
    Feedback360Cycle,
    Feedback360Question,
    Feedback360RaterCategory,
    Feedback360Request,
    Feedback360Response,
)
from hrsignals.models.signals import SignalEvidenceLink, TalentSignalDefinition, TalentSignalSnapshot

__all__ = [
    "AiExplainabilityRecord",
    "BiasNudgeTemplate",
    "ManagerBiasPattern",
    "Notification",
    "Feedback360Cycle",
    "Feedback360Question",
    "Feedback360RaterCategory",
    "Feedback360Request",
    "Feedback360Response",
    "SignalEvidenceLink",
    "TalentSignalDefinition",
    "TalentSignalSnapshot",
]
