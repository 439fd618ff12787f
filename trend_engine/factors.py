"""The five prediction factors.

Every factor is a pure function of its inputs and lies in [0, 1]:

* social velocity      – share of matched posts published recently
* influencer adoption  – matched posts by large accounts, normalised
* seasonal relevance   – whether the item's season covers the current month
* historical patterns  – delegated to a :class:`HistoricalPatternEstimator`
* market saturation    – current score blended with normalised mentions
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional, Protocol, Sequence

from .config import EngineConfig
from .models import PredictionFactors, SocialPost, Trend

NO_SIGNAL_VELOCITY = 0.1
IN_SEASON = 0.9
OFF_SEASON = 0.3
NO_SEASON = 0.5
NEUTRAL_HISTORY = 0.5

_ALL_MONTHS = frozenset(range(1, 13))

SEASON_MONTHS: Dict[str, FrozenSet[int]] = {
    "spring": frozenset({3, 4, 5}),
    "summer": frozenset({6, 7, 8}),
    "fall": frozenset({9, 10, 11}),
    "autumn": frozenset({9, 10, 11}),
    "winter": frozenset({12, 1, 2}),
    "all-season": _ALL_MONTHS,
}


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _normalise_season(season: str) -> str:
    return "-".join(season.strip().lower().replace("_", " ").split())


def social_velocity(matched: Sequence[SocialPost], now: datetime, recent_days: int = 7) -> float:
    """Fraction of *matched* posts newer than ``now - recent_days``.

    With no matched posts there is no signal at all, which scores a small
    floor rather than zero.
    """
    if not matched:
        return NO_SIGNAL_VELOCITY
    cutoff = now - timedelta(days=recent_days)
    recent = sum(1 for post in matched if post.posted_at > cutoff)
    return clamp(recent / len(matched))


def influencer_adoption(
    matched: Sequence[SocialPost],
    threshold: int = 10_000,
    normalizer: int = 10,
) -> float:
    influencer_posts = sum(1 for post in matched if post.follower_count > threshold)
    return clamp(influencer_posts / normalizer)


def seasonal_relevance(season: Optional[str], month: int) -> float:
    """Score how well *season* fits calendar *month* (1-12).

    Season tags outside the lookup table are treated as relevant to the
    current month.
    """
    if not season or not season.strip():
        return NO_SEASON
    months = SEASON_MONTHS.get(_normalise_season(season), frozenset({month}))
    return IN_SEASON if month in months else OFF_SEASON


def market_saturation(trend_score: float, social_mentions: int, saturation_point: int = 10_000) -> float:
    mention_saturation = clamp(social_mentions / saturation_point)
    return clamp((clamp(trend_score) + mention_saturation) / 2)


class HistoricalPatternEstimator(Protocol):
    """Scores a trend against the outcomes of earlier predictions."""

    def estimate(self, trend: Trend) -> float:
        ...


class NeutralHistoricalEstimator:
    """Stand-in used until real prediction outcomes are tracked; always neutral."""

    def estimate(self, trend: Trend) -> float:
        return NEUTRAL_HISTORY


class FactorCalculator:
    """Derives :class:`PredictionFactors` for one trend from its matched posts."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        historical_estimator: Optional[HistoricalPatternEstimator] = None,
    ):
        self.config = config or EngineConfig()
        self.historical_estimator = historical_estimator or NeutralHistoricalEstimator()

    def calculate(self, trend: Trend, matched: Sequence[SocialPost], now: datetime) -> PredictionFactors:
        cfg = self.config
        return PredictionFactors(
            social_velocity=social_velocity(matched, now, cfg.recent_days),
            influencer_adoption=influencer_adoption(matched, cfg.influencer_threshold, cfg.influencer_normalizer),
            seasonal_relevance=seasonal_relevance(trend.item.season, now.month),
            historical_patterns=clamp(self.historical_estimator.estimate(trend)),
            market_saturation=market_saturation(trend.trend_score, trend.social_mentions, cfg.mention_saturation),
        )
