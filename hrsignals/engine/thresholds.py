"""Detector thresholds, weights and signal taxonomy - immutable, injected into the engine."""

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Immutable config node."""

    model_config = ConfigDict(frozen=True)


class DistributionThresholds(FrozenModel):
    """Leniency / severity on the batch mean of overall scores."""

    leniency_mean: float = 4.2
    leniency_medium: float = 4.3
    leniency_high: float = 4.5
    leniency_affected_min: float = 4.0
    severity_mean: float = 2.8
    severity_medium: float = 2.7
    severity_high: float = 2.5
    severity_affected_max: float = 3.0
    confidence_base: float = 0.6
    confidence_slope: float = 0.3
    confidence_cap: float = 0.95


class CentralTendencyThresholds(FrozenModel):
    """Ratings bunched in the middle of the scale."""

    max_std: float = 0.5
    high_std: float = 0.3
    mid_low: float = 2.8
    mid_high: float = 3.5
    min_mid_fraction: float = 0.7
    confidence_base: float = 0.5
    confidence_slope: float = 0.8
    confidence_cap: float = 0.9


class HaloHornThresholds(FrozenModel):
    """Uniform per-dimension scores within a single review."""

    min_scored_dimensions: int = 2
    min_dimensions: int = 3
    max_std: float = 0.3
    medium_std: float = 0.15
    halo_mean: float = 4.0
    horn_mean: float = 2.0
    confidence_base: float = 0.5
    confidence_slope: float = 1.5
    confidence_cap: float = 0.85


class RecencyThresholds(FrozenModel):
    """Whole batch reviewed in a short window."""

    min_dated: int = 2
    max_span_days: float = 2.0
    min_batch_size: int = 5
    confidence: float = 0.6


class ContrastThresholds(FrozenModel):
    """Large swings between consecutively rated employees."""

    min_ratings: int = 4
    swing: float = 1.5
    max_swing_rate: float = 0.5
    confidence: float = 0.55


class ExplainabilityWeights(FrozenModel):
    """Fixed weight breakdown recorded with each detection run."""

    statistical_distribution: float = 0.4
    pattern_correlation: float = 0.3
    temporal_analysis: float = 0.3


class DetectorConfig(FrozenModel):
    """All bias detector tuning in one place."""

    minimum_sample_size: int = 3
    distribution: DistributionThresholds = Field(default_factory=DistributionThresholds)
    central_tendency: CentralTendencyThresholds = Field(default_factory=CentralTendencyThresholds)
    halo_horn: HaloHornThresholds = Field(default_factory=HaloHornThresholds)
    recency: RecencyThresholds = Field(default_factory=RecencyThresholds)
    contrast: ContrastThresholds = Field(default_factory=ContrastThresholds)
    explainability: ExplainabilityWeights = Field(default_factory=ExplainabilityWeights)
    default_confidence: float = 0.5


GENERAL_SIGNAL = "general"

SIGNAL_KEYWORDS: dict[str, tuple[str, ...]] = {
    "leadership_consistency": ("leadership", "management", "direction", "lead", "guide"),
    "collaboration": ("collaborat", "teamwork", "team", "cooperat", "partner"),
    "communication": ("communicat", "listen", "present", "clarity", "inform"),
    "people_development": ("develop", "coach", "mentor", "empower", "grow"),
    "strategic_thinking": ("strateg", "vision", "long-term", "planning", "priorit"),
    "technical_excellence": ("technical", "expertise", "quality", "knowledge", "skill"),
    "customer_focus": ("customer", "client", "stakeholder", "service"),
    "values_alignment": ("integrity", "ethic", "values", "honest", "trust"),
    "adaptability": ("change", "adapt", "flexib", "resilien", "innovat"),
}


class SignalConfig(FrozenModel):
    """Talent signal aggregation tuning."""

    keywords: dict[str, tuple[str, ...]] = Field(default_factory=lambda: dict(SIGNAL_KEYWORDS))
    fallback_signal: str = GENERAL_SIGNAL
    scale_max: float = 5.0
    volume_weight: float = 0.6
    diversity_weight: float = 0.4
    diversity_target: int = 3
    bias_high_deviation: float = 2.0
    bias_medium_deviation: float = 1.0
    bias_factor_deviation: float = 1.5
    strength_min: float = 80.0
    development_max: float = 60.0


DEFAULT_DETECTOR_CONFIG = DetectorConfig()
DEFAULT_SIGNAL_CONFIG = SignalConfig()
