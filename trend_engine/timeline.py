"""Projection of start / peak / decline dates from a confidence score."""
from __future__ import annotations

import hashlib
import math
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

import numpy as np

# half-open day ranges [low, high)
START_OFFSET_DAYS = (7, 21)
DECLINE_OFFSET_DAYS = (45, 90)
PEAK_BASE_DAYS = 30
PEAK_CONFIDENCE_DAYS = 60


class Timeline(NamedTuple):
    start: datetime
    peak: datetime
    decline: datetime


def _stable_key(text: str) -> int:
    """Return a process-independent 64-bit integer for *text*."""
    return int(hashlib.sha1(text.encode("utf-8")).hexdigest()[:16], 16)


class TimelineProjector:
    """Projects a trend's lifecycle dates.

    Randomness comes from a numpy ``Generator``. With a *seed* every item gets
    its own generator seeded from ``(seed, item_id)``, so results do not depend
    on the order in which worker threads pick candidates up. Without a seed a
    fresh, unseeded generator is used per projection.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def generator_for(self, item_id: str) -> np.random.Generator:
        if self.seed is None:
            return np.random.default_rng()
        return np.random.default_rng([self.seed, _stable_key(item_id)])

    @staticmethod
    def peak_offset_days(confidence: float) -> int:
        return math.floor(PEAK_BASE_DAYS + PEAK_CONFIDENCE_DAYS * confidence)

    def project(self, confidence: float, now: datetime, rng: np.random.Generator) -> Timeline:
        start = now + timedelta(days=int(rng.integers(*START_OFFSET_DAYS)))
        peak = start + timedelta(days=self.peak_offset_days(confidence))
        decline = peak + timedelta(days=int(rng.integers(*DECLINE_OFFSET_DAYS)))
        return Timeline(start=start, peak=peak, decline=decline)

    def project_for(self, item_id: str, confidence: float, now: datetime) -> Timeline:
        return self.project(confidence, now, self.generator_for(item_id))
