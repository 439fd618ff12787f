"""Pydantic data models shared by every stage of the scoring pass."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TrendStatus(str, Enum):
    """Lifecycle status of a trend."""

    EMERGING = "emerging"
    RISING = "rising"
    TRENDING = "trending"
    DECLINING = "declining"
    FADED = "faded"


class SocialPost(BaseModel):
    """Normalized post record handed over by the social collector."""

    platform: str = Field(..., min_length=1)
    post_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    username: Optional[str] = None
    follower_count: int = Field(0, ge=0)
    content: str = ""
    hashtags: List[str] = Field(default_factory=list)
    likes: int = Field(0, ge=0)
    shares: int = Field(0, ge=0)
    comments: int = Field(0, ge=0)
    engagement_rate: float = Field(0.0, ge=0)
    posted_at: datetime
    detected_items: List[str] = Field(default_factory=list)

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="before")
    @classmethod
    def _derive_engagement(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("follower_count", "content", "likes", "shares", "comments"):
            if data.get(key) is None:
                data.pop(key, None)
        for key in ("hashtags", "detected_items"):
            if data.get(key) is None:
                data[key] = []
        if data.get("engagement_rate") is None:
            try:
                followers = int(data.get("follower_count") or 0)
                interactions = sum(int(data.get(k) or 0) for k in ("likes", "shares", "comments"))
            except (TypeError, ValueError):
                # left to field validation to report
                return data
            data["engagement_rate"] = interactions / followers if followers > 0 else 0.0
        return data

    @field_validator("posted_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class FashionItem(BaseModel):
    """Catalogue item a trend is attached to (read-only here)."""

    id: str = Field(..., min_length=1)
    name: str = ""
    category: str = Field(..., min_length=1)
    season: Optional[str] = None
    brand: Optional[str] = None

    model_config = {
        "frozen": True,
    }


class TargetAudience(BaseModel):
    age_groups: List[str] = Field(default_factory=list)
    demographics: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)

    model_config = {
        "frozen": True,
    }


DEFAULT_TARGET_AUDIENCE = TargetAudience(
    age_groups=["18-24", "25-34", "35-44"],
    demographics=["urban", "suburban"],
    interests=["fashion", "lifestyle", "social media"],
)


class Trend(BaseModel):
    """Per-item trend record, joined with its fashion item."""

    item: FashionItem
    trend_score: float = Field(..., ge=0, le=1)
    prediction_confidence: Optional[float] = Field(None, ge=0, le=1)
    current_status: Optional[TrendStatus] = None
    predicted_peak_date: Optional[datetime] = None
    geographic_origin: Optional[str] = None
    target_demographics: Optional[TargetAudience] = None
    social_mentions: int = Field(0, ge=0)
    engagement_rate: float = Field(0.0, ge=0)
    influencer_adoptions: int = Field(0, ge=0)
    updated_at: Optional[datetime] = None

    @property
    def item_id(self) -> str:
        return self.item.id

    def apply_update(self, update: "TrendUpdate") -> "Trend":
        """Return a copy carrying the scoring-pass fields of *update*."""
        return self.model_copy(
            update={
                "current_status": update.current_status,
                "prediction_confidence": update.prediction_confidence,
                "predicted_peak_date": update.predicted_peak_date,
                "target_demographics": update.target_demographics,
                "updated_at": update.updated_at,
            },
        )

    def apply_signals(self, update: "SignalUpdate") -> "Trend":
        """Return a copy carrying refreshed social signals.

        Mention and influencer counts never decrease.
        """
        return self.model_copy(
            update={
                "trend_score": update.trend_score,
                "social_mentions": max(self.social_mentions, update.social_mentions),
                "engagement_rate": update.engagement_rate,
                "influencer_adoptions": max(self.influencer_adoptions, update.influencer_adoptions),
                "updated_at": update.updated_at,
            },
        )

    def snapshot(self) -> "TrendUpdate":
        """Capture the scoring-pass fields so a failed write can be undone."""
        return TrendUpdate(
            item_id=self.item_id,
            current_status=self.current_status,
            prediction_confidence=self.prediction_confidence,
            predicted_peak_date=self.predicted_peak_date,
            target_demographics=self.target_demographics,
            updated_at=self.updated_at,
        )


class TrendUpdate(BaseModel):
    """Fields a scoring pass writes back onto a trend."""

    item_id: str
    current_status: Optional[TrendStatus] = None
    prediction_confidence: Optional[float] = Field(None, ge=0, le=1)
    predicted_peak_date: Optional[datetime] = None
    target_demographics: Optional[TargetAudience] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "frozen": True,
    }


class SignalUpdate(BaseModel):
    """Fields the post-collection refresh writes back onto a trend."""

    item_id: str
    trend_score: float = Field(..., ge=0, le=1)
    social_mentions: int = Field(..., ge=0)
    engagement_rate: float = Field(..., ge=0)
    influencer_adoptions: int = Field(0, ge=0)
    updated_at: datetime

    model_config = {
        "frozen": True,
    }


class PredictionFactors(BaseModel):
    """The five raw factor values behind a confidence score."""

    social_velocity: float = Field(..., ge=0, le=1)
    influencer_adoption: float = Field(..., ge=0, le=1)
    seasonal_relevance: float = Field(..., ge=0, le=1)
    historical_patterns: float = Field(..., ge=0, le=1)
    market_saturation: float = Field(..., ge=0, le=1)

    model_config = {
        "frozen": True,
    }


class TrendPrediction(BaseModel):
    """Append-only record of one prediction for one item in one pass."""

    item_id: str
    prediction_date: datetime
    predicted_trend_start: datetime
    predicted_peak: datetime
    predicted_decline: datetime
    confidence_score: float = Field(..., ge=0, le=1)
    geographic_markets: List[str] = Field(..., min_length=1)
    target_audience: TargetAudience
    prediction_factors: PredictionFactors
    created_by: str = "trend_engine"

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def _check_timeline(self) -> "TrendPrediction":
        if not (
            self.prediction_date
            < self.predicted_trend_start
            < self.predicted_peak
            < self.predicted_decline
        ):
            raise ValueError("prediction dates must satisfy run < start < peak < decline")
        return self


class SocialMetrics(BaseModel):
    """Aggregate statistics over one post window."""

    total_posts: int = 0
    avg_engagement: float = 0.0
    trending_hashtags: Dict[str, int] = Field(default_factory=dict)
    platform_distribution: Dict[str, int] = Field(default_factory=dict)
    velocity: float = 0.0


class HashtagCount(BaseModel):
    tag: str
    count: int


class CollectionSummary(BaseModel):
    """Summary of a batch of freshly collected posts."""

    total_posts: int = 0
    platforms: Dict[str, int] = Field(default_factory=dict)
    top_hashtags: List[HashtagCount] = Field(default_factory=list)
    avg_engagement: float = 0.0
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None


class MarketInsights(BaseModel):
    """Cross-candidate rollup for a single pass."""

    emerging_categories: List[str] = Field(default_factory=list)
    declining_categories: List[str] = Field(default_factory=list)
    peak_season: Optional[str] = None
    top_markets: List[str] = Field(default_factory=list)
    confidence_avg: float = 0.0
    total_trends_analyzed: int = 0


class PassReport(BaseModel):
    """What a scoring pass hands back to its caller."""

    success: bool = True
    predictions_generated: int = 0
    candidates_analyzed: int = 0
    failed_candidates: int = 0
    skipped_records: int = 0
    candidates_not_started: int = 0
    predictions: List[TrendPrediction] = Field(default_factory=list)
    market_insights: MarketInsights = Field(default_factory=MarketInsights)
    social_metrics: SocialMetrics = Field(default_factory=SocialMetrics)
    timestamp: datetime
