"""Factor combination and lifecycle classification."""
from __future__ import annotations

from typing import Optional

from .config import EngineConfig
from .factors import clamp
from .models import PredictionFactors, TrendStatus

# (lower bound, status), checked top-down
STATUS_THRESHOLDS = (
    (0.8, TrendStatus.TRENDING),
    (0.6, TrendStatus.RISING),
    (0.4, TrendStatus.EMERGING),
    (0.2, TrendStatus.DECLINING),
)


class ScoreCombiner:
    """Weighted reduction of the five factors into a confidence score."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def confidence(self, factors: PredictionFactors) -> float:
        w = self.config
        score = (
            w.social_velocity_weight * factors.social_velocity
            + w.influencer_weight * factors.influencer_adoption
            + w.seasonal_weight * factors.seasonal_relevance
            + w.historical_weight * factors.historical_patterns
            + w.saturation_weight * (1 - factors.market_saturation)
        )
        return clamp(score)

    @staticmethod
    def combined(trend_score: float, confidence: float) -> float:
        """Mean of the stored trend score and the fresh confidence."""
        return clamp((trend_score + confidence) / 2)


def classify_status(combined: float) -> TrendStatus:
    """Map a combined score to a lifecycle status.

    Stateless: the previous status is never consulted, so a trend may move
    in either direction between passes.
    """
    for lower_bound, status in STATUS_THRESHOLDS:
        if combined >= lower_bound:
            return status
    return TrendStatus.FADED
