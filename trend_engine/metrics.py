"""Pure reductions over a window of social posts."""
from __future__ import annotations

from typing import Dict, Sequence

import pandas as pd

from .models import CollectionSummary, HashtagCount, SocialMetrics, SocialPost

SECONDS_PER_DAY = 24 * 60 * 60
TOP_HASHTAGS = 10


def posts_to_frame(posts: Sequence[SocialPost]) -> pd.DataFrame:
    """Flatten *posts* into one row per post (hashtags kept as lists)."""
    return pd.DataFrame(
        [
            {
                "platform": post.platform,
                "engagement_rate": post.engagement_rate,
                "posted_at": pd.Timestamp(post.posted_at),
                "hashtags": list(post.hashtags),
            }
            for post in posts
        ],
        columns=["platform", "engagement_rate", "posted_at", "hashtags"],
    )


def _hashtag_counts(df: pd.DataFrame) -> Dict[str, int]:
    tags = df["hashtags"].explode().dropna()
    return {str(tag): int(count) for tag, count in tags.value_counts(sort=False).items()}


def aggregate_social_metrics(posts: Sequence[SocialPost]) -> SocialMetrics:
    """Reduce a post window to engagement, hashtag, platform and velocity figures.

    Velocity is posts per day over the span between the earliest and latest
    post, with the span floored at one day. An empty window yields zeros.
    """
    if not posts:
        return SocialMetrics()

    df = posts_to_frame(posts)
    span_days = (df["posted_at"].max() - df["posted_at"].min()).total_seconds() / SECONDS_PER_DAY

    return SocialMetrics(
        total_posts=len(df),
        avg_engagement=float(df["engagement_rate"].mean()),
        trending_hashtags=_hashtag_counts(df),
        platform_distribution={str(k): int(v) for k, v in df["platform"].value_counts().items()},
        velocity=len(df) / max(1.0, span_days),
    )


def summarize_collection(posts: Sequence[SocialPost]) -> CollectionSummary:
    """Describe a batch of freshly collected posts."""
    if not posts:
        return CollectionSummary()

    df = posts_to_frame(posts)
    counts = _hashtag_counts(df)
    # stable sort keeps first-seen order among equal counts
    top = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:TOP_HASHTAGS]

    return CollectionSummary(
        total_posts=len(df),
        platforms={str(k): int(v) for k, v in df["platform"].value_counts().items()},
        top_hashtags=[HashtagCount(tag=tag, count=count) for tag, count in top],
        avg_engagement=float(df["engagement_rate"].mean()),
        earliest=df["posted_at"].min().to_pydatetime(),
        latest=df["posted_at"].max().to_pydatetime(),
    )
