import math

import numpy as np
import pytest

from trend_engine.timeline import TimelineProjector


@pytest.mark.parametrize("confidence", [0.0, 0.25, 0.68, 1.0])
def test_same_seed_reproduces_dates(confidence, now) -> None:
    projector = TimelineProjector()
    first = projector.project(confidence, now, np.random.default_rng(1234))
    second = projector.project(confidence, now, np.random.default_rng(1234))
    assert first == second


def test_offsets_stay_in_range(now) -> None:
    projector = TimelineProjector()
    rng = np.random.default_rng(7)
    for _ in range(200):
        confidence = float(rng.random())
        timeline = projector.project(confidence, now, rng)

        start_days = (timeline.start - now).days
        peak_days = (timeline.peak - timeline.start).days
        decline_days = (timeline.decline - timeline.peak).days

        assert 7 <= start_days < 21
        assert peak_days == math.floor(30 + 60 * confidence)
        assert 45 <= decline_days < 90
        assert now < timeline.start < timeline.peak < timeline.decline


def test_seeded_projector_is_per_item_deterministic(now) -> None:
    first = TimelineProjector(seed=42)
    second = TimelineProjector(seed=42)

    assert first.project_for("item-1", 0.5, now) == second.project_for("item-1", 0.5, now)
    # repeated calls do not consume shared state
    assert first.project_for("item-1", 0.5, now) == first.project_for("item-1", 0.5, now)


def test_seed_changes_outcome_across_items(now) -> None:
    projector = TimelineProjector(seed=42)
    timelines = {projector.project_for(f"item-{i}", 0.5, now) for i in range(20)}
    assert len(timelines) > 1


def test_peak_offset_days() -> None:
    assert TimelineProjector.peak_offset_days(0.0) == 30
    assert TimelineProjector.peak_offset_days(0.5) == 60
    assert TimelineProjector.peak_offset_days(1.0) == 90
