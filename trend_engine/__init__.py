"""Trend scoring & prediction engine.

Rescores fashion-trend candidates against a trailing window of social posts,
classifies their lifecycle status, projects start / peak / decline dates and
rolls the results up into market insights.
"""

from .config import EngineConfig
from .engine import TrendPredictionEngine, run_pass_payload
from .models import PassReport, SocialPost, Trend, TrendPrediction, TrendStatus

__all__ = [
    "EngineConfig",
    "PassReport",
    "SocialPost",
    "Trend",
    "TrendPrediction",
    "TrendPredictionEngine",
    "TrendStatus",
    "run_pass_payload",
]

__version__ = "0.1.0"
