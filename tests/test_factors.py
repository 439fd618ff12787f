import pytest

from trend_engine.config import EngineConfig
from trend_engine.factors import (
    FactorCalculator,
    influencer_adoption,
    market_saturation,
    seasonal_relevance,
    social_velocity,
)
from trend_engine.matching import CategoryMentionMatcher


def test_matcher_uses_detected_items_or_category_text(make_trend, make_post) -> None:
    trend = make_trend(item_id="item-42", category="Dress")
    tagged = make_post(detected_items=["item-42"], content="nothing relevant")
    mentioned = make_post(content="Loving this wrap DRESS for summer")
    unrelated = make_post(content="new sneakers drop", detected_items=["item-7"])

    assert CategoryMentionMatcher().match(trend, [tagged, mentioned, unrelated]) == [tagged, mentioned]


def test_matcher_returns_empty_list_without_matches(make_trend, make_post) -> None:
    trend = make_trend(category="jacket")
    assert CategoryMentionMatcher().match(trend, [make_post(content="dress")]) == []
    assert CategoryMentionMatcher().match(trend, []) == []


def test_velocity_without_matches_is_floor(now) -> None:
    assert social_velocity([], now) == 0.1


def test_velocity_is_share_of_recent_posts(make_post, now) -> None:
    posts = [make_post(days_ago=1), make_post(days_ago=6.9), make_post(days_ago=8), make_post(days_ago=20)]
    assert social_velocity(posts, now) == pytest.approx(0.5)
    assert social_velocity(posts[:2], now) == 1.0


def test_velocity_excludes_posts_exactly_at_cutoff(make_post, now) -> None:
    assert social_velocity([make_post(days_ago=7)], now) == 0.0


def test_influencer_adoption_counts_large_accounts_only(make_post) -> None:
    posts = [make_post(follower_count=10_001), make_post(follower_count=10_000), make_post(follower_count=50_000)]
    assert influencer_adoption(posts) == pytest.approx(0.2)


def test_influencer_adoption_without_posts_is_zero() -> None:
    assert influencer_adoption([]) == 0.0


def test_influencer_adoption_caps_at_one(make_post) -> None:
    posts = [make_post(follower_count=20_000) for _ in range(25)]
    assert influencer_adoption(posts) == 1.0


@pytest.mark.parametrize(
    "season, month, expected",
    [
        ("summer", 7, 0.9),
        ("Summer", 1, 0.3),
        ("winter", 12, 0.9),
        ("winter", 2, 0.9),
        ("winter", 3, 0.3),
        ("autumn", 10, 0.9),
        ("fall", 9, 0.9),
        ("spring", 8, 0.3),
        ("all-season", 4, 0.9),
        ("All Season", 11, 0.9),
        (None, 7, 0.5),
        ("", 7, 0.5),
        ("resort", 5, 0.9),
    ],
)
def test_seasonal_relevance(season, month, expected) -> None:
    assert seasonal_relevance(season, month) == expected


def test_market_saturation_blends_score_and_mentions() -> None:
    assert market_saturation(0.5, 0) == pytest.approx(0.25)
    assert market_saturation(0.4, 5_000) == pytest.approx(0.45)
    assert market_saturation(1.0, 250_000) == 1.0


class FixedHistory:
    def __init__(self, value: float):
        self.value = value
        self.seen = []

    def estimate(self, trend) -> float:
        self.seen.append(trend.item_id)
        return self.value


def test_calculator_defaults_to_neutral_history(make_trend, now) -> None:
    factors = FactorCalculator().calculate(make_trend(), [], now)
    assert factors.historical_patterns == 0.5
    assert factors.social_velocity == 0.1
    assert factors.influencer_adoption == 0.0
    assert factors.seasonal_relevance == 0.9


def test_calculator_uses_injected_history_and_clamps(make_trend, now) -> None:
    history = FixedHistory(1.7)
    factors = FactorCalculator(historical_estimator=history).calculate(make_trend(item_id="x"), [], now)
    assert factors.historical_patterns == 1.0
    assert history.seen == ["x"]


def test_calculator_honours_configured_windows(make_trend, make_post, now) -> None:
    config = EngineConfig(recent_days=3, influencer_threshold=100)
    posts = [make_post(days_ago=2, follower_count=101), make_post(days_ago=5, follower_count=50)]
    factors = FactorCalculator(config).calculate(make_trend(), posts, now)

    assert factors.social_velocity == pytest.approx(0.5)
    assert factors.influencer_adoption == pytest.approx(0.1)
