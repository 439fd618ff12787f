from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from trend_engine.models import FashionItem, SocialPost, Trend, TrendStatus

# a July afternoon: summer items are in season
NOW = datetime(2026, 7, 15, 12, 0, tzinfo=timezone.utc)

_post_ids = count(1)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_post():
    def _make_post(
        days_ago: float = 1,
        content: str = "",
        follower_count: int = 500,
        detected_items=(),
        hashtags=(),
        platform: str = "instagram",
        likes: int = 10,
        shares: int = 0,
        comments: int = 0,
    ) -> SocialPost:
        return SocialPost(
            platform=platform,
            post_id=f"{platform}_{next(_post_ids)}",
            follower_count=follower_count,
            content=content,
            hashtags=list(hashtags),
            likes=likes,
            shares=shares,
            comments=comments,
            posted_at=NOW - timedelta(days=days_ago),
            detected_items=list(detected_items),
        )

    return _make_post


@pytest.fixture
def make_trend():
    def _make_trend(
        item_id: str = "item-1",
        category: str = "dress",
        trend_score: float = 0.5,
        status: TrendStatus | None = TrendStatus.EMERGING,
        season: str | None = "summer",
        social_mentions: int = 0,
    ) -> Trend:
        return Trend(
            item=FashionItem(id=item_id, name=f"{category} {item_id}", category=category, season=season),
            trend_score=trend_score,
            current_status=status,
            social_mentions=social_mentions,
        )

    return _make_trend
