"""Store interfaces the engine reads from and writes to, plus local backends.

The engine only depends on the three protocols. ``InMemoryRepository`` backs
tests and embedding; ``JsonStateRepository`` keeps the same data in a single
JSON state file for the operator scripts.
"""
from __future__ import annotations

import json
import logging
import re
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Sequence, Union

import pandas as pd
from pydantic import ValidationError

from .errors import StoreUnavailableError
from .models import SignalUpdate, SocialPost, Trend, TrendPrediction, TrendStatus, TrendUpdate

logger = logging.getLogger(__name__)

Record = Union[Mapping[str, Any], Any]


class PostStore(Protocol):
    def fetch_posts(self, since: datetime) -> Iterable[Record]:
        """Return posts with ``posted_at >= since``."""
        ...


class TrendStore(Protocol):
    def fetch_candidates(self, statuses: Sequence[TrendStatus], limit: int) -> Iterable[Record]:
        """Return trends in *statuses*, highest score first, at most *limit*."""
        ...

    def get_trend(self, item_id: str) -> Optional[Trend]:
        ...

    def update_trend(self, update: TrendUpdate) -> None:
        ...

    def update_signals(self, update: SignalUpdate) -> None:
        ...


class PredictionStore(Protocol):
    def append_prediction(self, prediction: TrendPrediction) -> None:
        ...


class InMemoryRepository:
    """Thread-safe in-process implementation of all three stores."""

    def __init__(
        self,
        posts: Iterable[SocialPost] = (),
        trends: Iterable[Trend] = (),
        predictions: Iterable[TrendPrediction] = (),
    ):
        self._lock = threading.RLock()
        self.posts: List[SocialPost] = list(posts)
        self.trends: Dict[str, Trend] = {t.item_id: t for t in trends}
        self.predictions: List[TrendPrediction] = list(predictions)

    # -- posts ---------------------------------------------------------------

    def add_posts(self, posts: Iterable[SocialPost]) -> None:
        with self._transaction():
            self.posts.extend(posts)

    def fetch_posts(self, since: datetime) -> List[SocialPost]:
        with self._lock:
            selected = [p for p in self.posts if p.posted_at >= since]
        return sorted(selected, key=lambda p: p.posted_at)

    # -- trends --------------------------------------------------------------

    def add_trend(self, trend: Trend) -> None:
        with self._transaction():
            self.trends[trend.item_id] = trend

    def get_trend(self, item_id: str) -> Optional[Trend]:
        with self._lock:
            return self.trends.get(item_id)

    def fetch_candidates(self, statuses: Sequence[TrendStatus], limit: int) -> List[Trend]:
        wanted = {TrendStatus(s) for s in statuses}
        with self._lock:
            selected = [t for t in self.trends.values() if t.current_status in wanted]
        selected.sort(key=lambda t: t.trend_score, reverse=True)
        return selected[:limit]

    def update_trend(self, update: TrendUpdate) -> None:
        with self._transaction():
            trend = self._require(update.item_id)
            self.trends[update.item_id] = trend.apply_update(update)

    def update_signals(self, update: SignalUpdate) -> None:
        with self._transaction():
            trend = self._require(update.item_id)
            self.trends[update.item_id] = trend.apply_signals(update)

    # -- predictions ---------------------------------------------------------

    def append_prediction(self, prediction: TrendPrediction) -> None:
        with self._transaction():
            self.predictions.append(prediction)

    def _require(self, item_id: str) -> Trend:
        try:
            return self.trends[item_id]
        except KeyError:
            raise KeyError(f"no trend recorded for item {item_id}") from None

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Apply a change and persist it; if either step fails the change is undone."""
        with self._lock:
            posts, trends, predictions = list(self.posts), dict(self.trends), list(self.predictions)
            try:
                yield
                self._changed()
            except Exception:
                self.posts, self.trends, self.predictions = posts, trends, predictions
                raise

    def _changed(self) -> None:
        """Hook for persistent subclasses; called with the lock held."""


class JsonStateRepository(InMemoryRepository):
    """:class:`InMemoryRepository` mirrored to a JSON state file.

    The file holds ``posts``, ``trends`` and ``predictions`` lists and is
    rewritten after every change. Records that fail validation on load are
    skipped with a warning.
    """

    def __init__(self, state_file: Union[str, Path]):
        self.state_file = Path(state_file)
        state = self.load_state()
        super().__init__(
            posts=_validate_all(SocialPost, state.get("posts", []), "post"),
            trends=_validate_all(Trend, state.get("trends", []), "trend"),
            predictions=_validate_all(TrendPrediction, state.get("predictions", []), "prediction"),
        )

    def load_state(self) -> Dict[str, Any]:
        """Read the state file; an unreadable or corrupt file makes the store unavailable."""
        if not self.state_file.exists():
            return {}
        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                state = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreUnavailableError("trend", e) from e
        if not isinstance(state, dict):
            raise StoreUnavailableError("trend", ValueError(f"{self.state_file} does not hold a JSON object"))
        return state

    def save_state(self) -> None:
        with self._lock:
            state = {
                "posts": [p.model_dump(mode="json") for p in self.posts],
                "trends": [t.model_dump(mode="json") for t in self.trends.values()],
                "predictions": [p.model_dump(mode="json") for p in self.predictions],
                "saved_at": datetime.now().isoformat(),
            }
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.state_file.with_suffix(self.state_file.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(state, f, indent=2, default=str)
            tmp_path.replace(self.state_file)

    def _changed(self) -> None:
        self.save_state()


def _validate_all(model, records: Iterable[Mapping[str, Any]], kind: str) -> List[Any]:
    valid = []
    for index, record in enumerate(records):
        try:
            valid.append(model.model_validate(record))
        except ValidationError as exc:
            logger.warning(f"Skipping malformed {kind} #{index}: {exc.error_count()} validation error(s)")
    return valid


# ---------------------------------------------------------------------------
# CSV import
# ---------------------------------------------------------------------------

_LIST_SPLIT = re.compile(r"[,;\s]+")


def _split_list(value: Any) -> List[str]:
    """Turn a CSV cell like ``"#ootd #style"`` or ``"a;b"`` into a list."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [part for part in _LIST_SPLIT.split(str(value)) if part]


def _clean_cell(value: Any) -> Any:
    if hasattr(value, "item"):
        value = value.item()  # numpy scalar -> python
    if isinstance(value, float) and pd.isna(value):
        return None
    return value


def load_posts_csv(csv_path: Union[str, Path]) -> List[SocialPost]:
    """Load collector posts from a CSV export.

    Expected columns follow :class:`SocialPost`; ``hashtags`` and
    ``detected_items`` hold separator-delimited lists. Malformed rows are
    skipped with a warning.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(csv_path)

    df = pd.read_csv(csv_path, dtype={"post_id": str, "user_id": str})
    posts: List[SocialPost] = []
    for index, row in df.iterrows():
        record = {key: _clean_cell(value) for key, value in row.items()}
        record["hashtags"] = _split_list(row.get("hashtags"))
        record["detected_items"] = _split_list(row.get("detected_items"))
        try:
            posts.append(SocialPost.model_validate(record))
        except ValidationError as exc:
            logger.warning(f"Skipping malformed post row {index} in {csv_path.name}: {exc.error_count()} error(s)")

    logger.info(f"Loaded {len(posts)} posts from {csv_path}")
    return posts


def open_state_repository(
    state_file: Union[str, Path],
    posts_csv: Optional[Union[str, Path]] = None,
) -> JsonStateRepository:
    """Open the JSON state, importing posts from *posts_csv* not already stored.

    Raises :class:`StoreUnavailableError` when the state file or the CSV cannot be read.
    """
    repository = JsonStateRepository(state_file)
    if posts_csv is not None:
        known = {(p.platform, p.post_id) for p in repository.posts}
        try:
            imported = load_posts_csv(posts_csv)
        except (OSError, ValueError) as e:
            raise StoreUnavailableError("post", e) from e
        fresh = [p for p in imported if (p.platform, p.post_id) not in known]
        if fresh:
            repository.add_posts(fresh)
        logger.info(f"Imported {len(fresh)} new posts into {repository.state_file}")
    return repository
