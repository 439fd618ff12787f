import pytest

from trend_engine.config import EngineConfig
from trend_engine.models import PredictionFactors, TrendStatus
from trend_engine.scoring import ScoreCombiner, classify_status


@pytest.mark.parametrize(
    "combined, expected",
    [
        (0.85, TrendStatus.TRENDING),
        (0.8, TrendStatus.TRENDING),
        (0.65, TrendStatus.RISING),
        (0.6, TrendStatus.RISING),
        (0.45, TrendStatus.EMERGING),
        (0.4, TrendStatus.EMERGING),
        (0.25, TrendStatus.DECLINING),
        (0.2, TrendStatus.DECLINING),
        (0.1, TrendStatus.FADED),
        (0.0, TrendStatus.FADED),
        (1.0, TrendStatus.TRENDING),
    ],
)
def test_classify_status(combined, expected) -> None:
    assert classify_status(combined) is expected


def _factors(**overrides) -> PredictionFactors:
    values = dict(
        social_velocity=1.0,
        influencer_adoption=0.2,
        seasonal_relevance=0.9,
        historical_patterns=0.5,
        market_saturation=0.25,
    )
    values.update(overrides)
    return PredictionFactors(**values)


def test_confidence_uses_fixed_weights() -> None:
    combiner = ScoreCombiner()
    expected = 0.3 * 1.0 + 0.25 * 0.2 + 0.2 * 0.9 + 0.15 * 0.5 + 0.1 * (1 - 0.25)
    assert combiner.confidence(_factors()) == pytest.approx(expected)
    assert combiner.confidence(_factors()) == pytest.approx(0.68)


def test_confidence_bounds() -> None:
    combiner = ScoreCombiner()
    best = _factors(
        social_velocity=1, influencer_adoption=1, seasonal_relevance=1, historical_patterns=1, market_saturation=0
    )
    worst = _factors(
        social_velocity=0, influencer_adoption=0, seasonal_relevance=0, historical_patterns=0, market_saturation=1
    )
    assert combiner.confidence(best) == pytest.approx(1.0)
    assert combiner.confidence(worst) == 0.0


def test_confidence_respects_configured_weights() -> None:
    config = EngineConfig(
        social_velocity_weight=1.0,
        influencer_weight=0.0,
        seasonal_weight=0.0,
        historical_weight=0.0,
        saturation_weight=0.0,
    )
    assert ScoreCombiner(config).confidence(_factors(social_velocity=0.37)) == pytest.approx(0.37)


def test_combined_is_mean_of_score_and_confidence() -> None:
    assert ScoreCombiner.combined(0.5, 0.68) == pytest.approx(0.59)
    assert ScoreCombiner.combined(0.0, 0.0) == 0.0
