"""Exception taxonomy for the trend engine."""
from __future__ import annotations


class TrendEngineError(Exception):
    """Base class for every error raised by the engine."""


class ConfigError(TrendEngineError, ValueError):
    """Engine configuration is inconsistent."""


class StoreUnavailableError(TrendEngineError):
    """A store needed at pass start could not be read; the pass is aborted."""

    def __init__(self, store: str, cause: Exception | None = None):
        self.store = store
        self.cause = cause
        message = f"{store} store unavailable"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class InvalidRecordError(TrendEngineError, ValueError):
    """An input record is malformed and has to be skipped."""

    def __init__(self, kind: str, reason: str):
        self.kind = kind
        self.reason = reason
        super().__init__(f"invalid {kind} record: {reason}")


class CandidateWriteError(TrendEngineError):
    """Persisting one candidate's result failed."""

    def __init__(self, item_id: str, cause: Exception):
        self.item_id = item_id
        self.cause = cause
        super().__init__(f"failed to persist results for item {item_id}: {cause}")
