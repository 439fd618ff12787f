"""Geographic market selection and the cross-candidate market rollup."""
from __future__ import annotations

from collections import Counter
from typing import List, Sequence

import pandas as pd

from .models import MarketInsights, Trend, TrendPrediction

MARKETS = ("North America", "Europe", "Asia")

EMERGING_CATEGORY_MEAN = 0.6
DECLINING_CATEGORY_MEAN = 0.3
TOP_MARKETS = 3

# calendar month (1-12) -> season label
MONTH_SEASONS = {
    12: "Winter", 1: "Winter", 2: "Winter",
    3: "Spring", 4: "Spring", 5: "Spring",
    6: "Summer", 7: "Summer", 8: "Summer",
    9: "Fall", 10: "Fall", 11: "Fall",
}


def determine_geographic_markets(trend_score: float) -> List[str]:
    """Pick target markets from the strength of a trend; never empty.

    TODO: derive markets from post geolocation once the collector supplies it.
    """
    if trend_score > 0.7:
        return list(MARKETS)
    if trend_score > 0.4:
        return list(MARKETS[:2])
    return [MARKETS[0]]


def _category_means(trends: Sequence[Trend]) -> pd.Series:
    df = pd.DataFrame(
        [{"category": t.item.category, "trend_score": t.trend_score} for t in trends],
        columns=["category", "trend_score"],
    )
    return df.groupby("category", sort=False)["trend_score"].mean()


def peak_season(predictions: Sequence[TrendPrediction]) -> str | None:
    """Season of the most common predicted-peak month (earliest month wins ties)."""
    if not predictions:
        return None
    counts = Counter(p.predicted_peak.month for p in predictions)
    month = min(counts, key=lambda m: (-counts[m], m))
    return MONTH_SEASONS[month]


def top_markets(predictions: Sequence[TrendPrediction], limit: int = TOP_MARKETS) -> List[str]:
    counts = Counter(market for p in predictions for market in p.geographic_markets)
    return [market for market, _ in counts.most_common(limit)]


def generate_market_insights(
    predictions: Sequence[TrendPrediction],
    trends: Sequence[Trend],
) -> MarketInsights:
    """Roll up the predictions of one pass and every candidate trend it analyzed."""
    insights = MarketInsights(total_trends_analyzed=len(trends))
    if trends:
        means = _category_means(trends)
        insights.emerging_categories = [str(c) for c, m in means.items() if m > EMERGING_CATEGORY_MEAN]
        insights.declining_categories = [str(c) for c, m in means.items() if m < DECLINING_CATEGORY_MEAN]

    if predictions:
        insights.confidence_avg = sum(p.confidence_score for p in predictions) / len(predictions)
        insights.peak_season = peak_season(predictions)
        insights.top_markets = top_markets(predictions)

    return insights
