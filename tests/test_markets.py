from datetime import datetime, timedelta, timezone

import pytest

from trend_engine.markets import determine_geographic_markets, generate_market_insights, peak_season
from trend_engine.models import DEFAULT_TARGET_AUDIENCE, PredictionFactors, TrendPrediction

RUN = datetime(2026, 1, 10, tzinfo=timezone.utc)


def _prediction(peak: datetime, markets, confidence: float = 0.5, item_id: str = "i") -> TrendPrediction:
    return TrendPrediction(
        item_id=item_id,
        prediction_date=RUN,
        predicted_trend_start=RUN + timedelta(days=7),
        predicted_peak=peak,
        predicted_decline=peak + timedelta(days=45),
        confidence_score=confidence,
        geographic_markets=list(markets),
        target_audience=DEFAULT_TARGET_AUDIENCE,
        prediction_factors=PredictionFactors(
            social_velocity=0.1,
            influencer_adoption=0.0,
            seasonal_relevance=0.5,
            historical_patterns=0.5,
            market_saturation=0.5,
        ),
    )


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.9, ["North America", "Europe", "Asia"]),
        (0.7, ["North America", "Europe"]),
        (0.5, ["North America", "Europe"]),
        (0.4, ["North America"]),
        (0.0, ["North America"]),
    ],
)
def test_geographic_markets_follow_trend_score(score, expected) -> None:
    assert determine_geographic_markets(score) == expected


def test_category_flags(make_trend) -> None:
    trends = [
        make_trend(item_id="a", category="dress", trend_score=0.8),
        make_trend(item_id="b", category="dress", trend_score=0.7),
        make_trend(item_id="c", category="dress", trend_score=0.9),
        make_trend(item_id="d", category="boots", trend_score=0.1),
        make_trend(item_id="e", category="boots", trend_score=0.2),
        make_trend(item_id="f", category="scarf", trend_score=0.45),
    ]
    insights = generate_market_insights([], trends)

    assert insights.emerging_categories == ["dress"]
    assert insights.declining_categories == ["boots"]
    assert insights.total_trends_analyzed == 6
    assert insights.peak_season is None
    assert insights.top_markets == []
    assert insights.confidence_avg == 0.0


def test_prediction_rollup() -> None:
    predictions = [
        _prediction(datetime(2026, 4, 3, tzinfo=timezone.utc), ["North America", "Europe", "Asia"], 0.9),
        _prediction(datetime(2026, 4, 20, tzinfo=timezone.utc), ["North America", "Europe"], 0.6),
        _prediction(datetime(2026, 7, 1, tzinfo=timezone.utc), ["North America"], 0.3),
    ]
    insights = generate_market_insights(predictions, [])

    assert insights.confidence_avg == pytest.approx(0.6)
    assert insights.peak_season == "Spring"
    assert insights.top_markets == ["North America", "Europe", "Asia"]


def test_peak_season_ties_go_to_earliest_month() -> None:
    predictions = [
        _prediction(datetime(2026, 12, 1, tzinfo=timezone.utc), ["Asia"]),
        _prediction(datetime(2026, 2, 1, tzinfo=timezone.utc), ["Asia"]),
        _prediction(datetime(2026, 6, 1, tzinfo=timezone.utc), ["Asia"]),
    ]
    assert peak_season(predictions) == "Winter"
    assert peak_season(predictions[2:]) == "Summer"
    assert peak_season([]) is None


def test_empty_inputs_give_empty_insights() -> None:
    insights = generate_market_insights([], [])
    assert insights.emerging_categories == []
    assert insights.declining_categories == []
    assert insights.total_trends_analyzed == 0
