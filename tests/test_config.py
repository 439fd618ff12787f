import pytest

from trend_engine.config import EngineConfig
from trend_engine.errors import ConfigError
from trend_engine.models import TrendStatus


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("MAX_WORKERS", "SEED", "WINDOW_DAYS", "SOCIAL_VELOCITY_WEIGHT", "SATURATION_WEIGHT"):
        monkeypatch.delenv(f"TREND_ENGINE_{name}", raising=False)


def test_defaults() -> None:
    config = EngineConfig()
    assert config.window_days == 30
    assert config.recent_days == 7
    assert config.candidate_statuses == (TrendStatus.EMERGING, TrendStatus.RISING)
    assert config.candidate_limit == 50
    assert config.seed is None
    assert sum(config.weights.values()) == pytest.approx(1.0)
    assert config.weights["social_velocity_weight"] == 0.30


def test_weights_must_sum_to_one() -> None:
    with pytest.raises(ConfigError, match="sum to 1.0"):
        EngineConfig.build(social_velocity_weight=0.5)


def test_invalid_values_raise_config_error() -> None:
    with pytest.raises(ConfigError):
        EngineConfig.build(max_workers=0)
    with pytest.raises(ConfigError):
        EngineConfig.build(seed=-1)


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TREND_ENGINE_MAX_WORKERS", "8")
    monkeypatch.setenv("TREND_ENGINE_SEED", "17")
    monkeypatch.setenv("TREND_ENGINE_SOCIAL_VELOCITY_WEIGHT", "0.35")
    monkeypatch.setenv("TREND_ENGINE_SATURATION_WEIGHT", "0.05")

    config = EngineConfig.from_env()
    assert config.max_workers == 8
    assert config.seed == 17
    assert config.social_velocity_weight == 0.35


def test_overrides_win_and_none_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("TREND_ENGINE_MAX_WORKERS", "8")
    config = EngineConfig.from_env(max_workers=2, seed=None)
    assert config.max_workers == 2
    assert config.seed is None


def test_bad_env_value_raises_config_error(monkeypatch) -> None:
    monkeypatch.setenv("TREND_ENGINE_MAX_WORKERS", "lots")
    with pytest.raises(ConfigError):
        EngineConfig.from_env()
