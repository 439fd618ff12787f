"""Engine configuration.

Defaults reproduce the constants recorded predictions were produced with.
``EngineConfig.from_env()`` loads ``.env`` (via python-dotenv) and reads
``TREND_ENGINE_*`` overrides, e.g. ``TREND_ENGINE_MAX_WORKERS=8`` or
``TREND_ENGINE_SOCIAL_VELOCITY_WEIGHT=0.35``.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import ConfigError
from .models import DEFAULT_TARGET_AUDIENCE, TargetAudience, TrendStatus

ENV_PREFIX = "TREND_ENGINE_"

WEIGHT_FIELDS = (
    "social_velocity_weight",
    "influencer_weight",
    "seasonal_weight",
    "historical_weight",
    "saturation_weight",
)

_ENV_FIELDS = (
    "window_days",
    "recent_days",
    "max_workers",
    "candidate_limit",
    "top_predictions",
    "deadline_seconds",
    "seed",
    "created_by",
) + WEIGHT_FIELDS


class EngineConfig(BaseModel):
    """Tunables for a scoring pass."""

    window_days: int = Field(30, gt=0, description="Trailing post window in days")
    recent_days: int = Field(7, gt=0, description="Window counted as 'recent' by the velocity factor")
    influencer_threshold: int = Field(10_000, ge=0, description="Followers above which an author is an influencer")
    influencer_normalizer: int = Field(10, gt=0)
    mention_saturation: int = Field(10_000, gt=0, description="Mention count treated as fully saturated")

    candidate_statuses: Tuple[TrendStatus, ...] = (TrendStatus.EMERGING, TrendStatus.RISING)
    candidate_limit: int = Field(50, gt=0)
    top_predictions: int = Field(10, ge=0)

    max_workers: int = Field(4, gt=0)
    deadline_seconds: Optional[float] = Field(None, gt=0)
    seed: Optional[int] = Field(None, ge=0)
    created_by: str = "trend_engine"

    social_velocity_weight: float = Field(0.30, ge=0, le=1)
    influencer_weight: float = Field(0.25, ge=0, le=1)
    seasonal_weight: float = Field(0.20, ge=0, le=1)
    historical_weight: float = Field(0.15, ge=0, le=1)
    saturation_weight: float = Field(0.10, ge=0, le=1)

    target_audience: TargetAudience = DEFAULT_TARGET_AUDIENCE

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def _check_weights(self) -> "EngineConfig":
        total = sum(getattr(self, name) for name in WEIGHT_FIELDS)
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"factor weights must sum to 1.0, got {total:.6f}")
        return self

    @property
    def weights(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in WEIGHT_FIELDS}

    @classmethod
    def build(cls, **values: Any) -> "EngineConfig":
        """Construct a config, reporting validation problems as :class:`ConfigError`."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> "EngineConfig":
        """Read ``TREND_ENGINE_*`` variables; explicit *overrides* win.

        ``None`` overrides are ignored so argparse defaults can be passed through.
        """
        load_dotenv()
        values: Dict[str, Any] = {}
        for name in _ENV_FIELDS:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)
