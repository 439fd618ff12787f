"""Selection of the posts that plausibly reference a trend."""
from __future__ import annotations

from typing import List, Protocol, Sequence

from .models import SocialPost, Trend


class RelevanceMatcher(Protocol):
    """Anything that can pick the posts relevant to a trend."""

    def match(self, trend: Trend, posts: Sequence[SocialPost]) -> List[SocialPost]:
        ...


class CategoryMentionMatcher:
    """Coarse keyword heuristic.

    A post matches when the collector tagged it with the trend's item id, or
    when its text contains the item's category name (case-insensitive
    substring). This is plain text containment, not semantic matching; swap
    in another :class:`RelevanceMatcher` for anything smarter.
    """

    def match(self, trend: Trend, posts: Sequence[SocialPost]) -> List[SocialPost]:
        item_id = trend.item.id
        category = trend.item.category.lower()
        return [
            post
            for post in posts
            if item_id in post.detected_items or (category and category in post.content.lower())
        ]
