"""Refresh of trend signals from a freshly collected batch of posts."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

import pandas as pd

from .config import EngineConfig
from .factors import clamp
from .models import SignalUpdate, SocialPost
from .stores import TrendStore

logger = logging.getLogger(__name__)

MIN_MENTIONS = 3
BASE_SCORE = 0.3
SCORE_PER_MENTION = 0.05
ENGAGEMENT_MULTIPLIER = 10


def signal_score(mentions: int, avg_engagement: float) -> float:
    return clamp(BASE_SCORE + mentions * SCORE_PER_MENTION + avg_engagement * ENGAGEMENT_MULTIPLIER)


def build_signal_updates(
    posts: Sequence[SocialPost],
    now: datetime,
    influencer_threshold: int = 10_000,
) -> Dict[str, SignalUpdate]:
    """Group *posts* by detected item and score every item mentioned often enough.

    An item detected twice in the same post counts as one mention.
    """
    df = pd.DataFrame(
        [
            {
                "item_id": list(dict.fromkeys(post.detected_items)),
                "engagement_rate": post.engagement_rate,
                "influencer": post.follower_count > influencer_threshold,
            }
            for post in posts
        ],
        columns=["item_id", "engagement_rate", "influencer"],
    )
    mentions = df.explode("item_id").dropna(subset=["item_id"])
    if mentions.empty:
        return {}

    per_item = mentions.groupby("item_id", sort=False).agg(
        mentions=("engagement_rate", "size"),
        avg_engagement=("engagement_rate", "mean"),
        influencers=("influencer", "sum"),
    )
    per_item = per_item[per_item["mentions"] >= MIN_MENTIONS]

    return {
        str(row.Index): SignalUpdate(
            item_id=str(row.Index),
            trend_score=signal_score(int(row.mentions), float(row.avg_engagement)),
            social_mentions=int(row.mentions),
            engagement_rate=float(row.avg_engagement),
            influencer_adoptions=int(row.influencers),
            updated_at=now,
        )
        for row in per_item.itertuples()
    }


def refresh_trend_signals(
    posts: Sequence[SocialPost],
    trend_store: TrendStore,
    config: Optional[EngineConfig] = None,
    now: Optional[datetime] = None,
) -> int:
    """Write refreshed signals for every known item; returns how many trends changed."""
    config = config or EngineConfig()
    now = now or datetime.now(timezone.utc)
    updated = 0

    for item_id, update in build_signal_updates(posts, now, config.influencer_threshold).items():
        if trend_store.get_trend(item_id) is None:
            logger.warning(f"No trend recorded for detected item {item_id}, skipping signal refresh")
            continue
        try:
            trend_store.update_signals(update)
        except Exception as e:
            logger.error(f"Error updating signals for item {item_id}: {e}")
            continue
        updated += 1

    logger.info(f"Refreshed signals for {updated} trends from {len(posts)} posts")
    return updated
