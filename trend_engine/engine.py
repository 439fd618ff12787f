"""Scoring pass: rescoring every trend candidate against the current post window.

One call to :meth:`TrendPredictionEngine.run_pass` reads the post window and
the candidates, computes factors, confidence, status and timeline for each
candidate on a bounded thread pool, writes each candidate's trend update and
prediction as one unit, and returns a :class:`PassReport`.

Failure handling
----------------
* a store that cannot be read at pass start aborts the pass
  (:class:`StoreUnavailableError`);
* malformed post or candidate records are skipped and counted;
* a candidate whose write fails is logged and counted, the pass goes on.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .config import EngineConfig
from .errors import CandidateWriteError, InvalidRecordError, StoreUnavailableError, TrendEngineError
from .factors import FactorCalculator, HistoricalPatternEstimator
from .markets import determine_geographic_markets, generate_market_insights
from .matching import CategoryMentionMatcher, RelevanceMatcher
from .metrics import aggregate_social_metrics
from .models import PassReport, SocialPost, Trend, TrendPrediction, TrendUpdate, as_utc
from .scoring import ScoreCombiner, classify_status
from .stores import PostStore, PredictionStore, TrendStore
from .timeline import TimelineProjector

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_record(model: Type[M], record: Any, kind: str) -> M:
    """Validate a store record into *model*, raising :class:`InvalidRecordError`."""
    if isinstance(record, model):
        return record
    if not isinstance(record, Mapping):
        raise InvalidRecordError(kind, f"unsupported record type {type(record).__name__}")
    try:
        return model.model_validate(record)
    except ValidationError as exc:
        raise InvalidRecordError(kind, f"{exc.error_count()} validation error(s)") from exc


def coerce_records(model: Type[M], records: Iterable[Any], kind: str) -> Tuple[List[M], int]:
    """Return the valid records and how many were skipped."""
    valid: List[M] = []
    skipped = 0
    for record in records:
        try:
            valid.append(coerce_record(model, record, kind))
        except InvalidRecordError as e:
            skipped += 1
            logger.warning(f"Skipping {e}")
    return valid, skipped


class TrendPredictionEngine:
    """Runs scoring passes over the configured stores."""

    def __init__(
        self,
        post_store: PostStore,
        trend_store: TrendStore,
        prediction_store: PredictionStore,
        config: Optional[EngineConfig] = None,
        matcher: Optional[RelevanceMatcher] = None,
        historical_estimator: Optional[HistoricalPatternEstimator] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.post_store = post_store
        self.trend_store = trend_store
        self.prediction_store = prediction_store
        self.config = config or EngineConfig()
        self.matcher = matcher or CategoryMentionMatcher()
        self.factor_calculator = FactorCalculator(self.config, historical_estimator)
        self.combiner = ScoreCombiner(self.config)
        self.projector = TimelineProjector(self.config.seed)
        self.clock = clock
        # set by cancel(); cleared when the pass it applied to ends
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        """Stop launching new candidate computations; in-flight ones finish.

        Applies to the running pass, or to the next one if none is running.
        """
        self.cancel_event.set()

    # ------------------------------------------------------------------
    # Per-candidate work
    # ------------------------------------------------------------------

    def score_candidate(
        self,
        trend: Trend,
        posts: Sequence[SocialPost],
        now: datetime,
    ) -> Tuple[TrendUpdate, TrendPrediction]:
        """Compute the trend update and prediction for one candidate. No I/O."""
        matched = self.matcher.match(trend, posts)
        factors = self.factor_calculator.calculate(trend, matched, now)
        confidence = self.combiner.confidence(factors)
        status = classify_status(self.combiner.combined(trend.trend_score, confidence))
        timeline = self.projector.project_for(trend.item_id, confidence, now)
        audience = self.config.target_audience

        logger.debug(
            f"{trend.item_id}: {len(matched)} matched posts, confidence={confidence:.4f}, status={status.value}"
        )

        prediction = TrendPrediction(
            item_id=trend.item_id,
            prediction_date=now,
            predicted_trend_start=timeline.start,
            predicted_peak=timeline.peak,
            predicted_decline=timeline.decline,
            confidence_score=confidence,
            geographic_markets=determine_geographic_markets(trend.trend_score),
            target_audience=audience,
            prediction_factors=factors,
            created_by=self.config.created_by,
        )
        update = TrendUpdate(
            item_id=trend.item_id,
            current_status=status,
            prediction_confidence=confidence,
            predicted_peak_date=timeline.peak,
            target_demographics=audience,
            updated_at=now,
        )
        return update, prediction

    def _persist(self, trend: Trend, update: TrendUpdate, prediction: TrendPrediction) -> None:
        """Write trend update and prediction together, undoing the update if the append fails."""
        previous = trend.snapshot()
        try:
            self.trend_store.update_trend(update)
        except Exception as e:
            raise CandidateWriteError(trend.item_id, e) from e

        try:
            self.prediction_store.append_prediction(prediction)
        except Exception as e:
            try:
                self.trend_store.update_trend(previous)
            except Exception as restore_error:
                logger.error(f"Could not restore trend {trend.item_id} after failed prediction write: {restore_error}")
            raise CandidateWriteError(trend.item_id, e) from e

    def _process_candidate(self, trend: Trend, posts: Sequence[SocialPost], now: datetime) -> TrendPrediction:
        update, prediction = self.score_candidate(trend, posts, now)
        self._persist(trend, update, prediction)
        return prediction

    # ------------------------------------------------------------------
    # Pass orchestration
    # ------------------------------------------------------------------

    def _should_stop(self, cancel: threading.Event, deadline: Optional[float]) -> bool:
        if cancel.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline

    def _score_candidates(
        self,
        candidates: Sequence[Trend],
        posts: Sequence[SocialPost],
        now: datetime,
        cancel: threading.Event,
        deadline: Optional[float],
    ) -> Tuple[List[Tuple[Trend, TrendPrediction]], int, int]:
        """Fan candidates out over the pool; returns (results, failed, not started)."""
        max_workers = self.config.max_workers
        pending = deque(enumerate(candidates))
        in_flight: Dict[Future, Tuple[int, Trend]] = {}
        results: List[Tuple[int, Trend, TrendPrediction]] = []
        failed = 0

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="trend-pass") as executor:
            while pending or in_flight:
                while pending and len(in_flight) < max_workers and not self._should_stop(cancel, deadline):
                    index, trend = pending.popleft()
                    in_flight[executor.submit(self._process_candidate, trend, posts, now)] = (index, trend)

                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    index, trend = in_flight.pop(future)
                    try:
                        results.append((index, trend, future.result()))
                    except CandidateWriteError as e:
                        failed += 1
                        logger.error(str(e))
                    except Exception:
                        failed += 1
                        logger.exception(f"Scoring failed for item {trend.item_id}")

        if pending:
            logger.warning(f"Pass stopped early: {len(pending)} candidates not started")

        results.sort(key=lambda r: r[0])
        return [(trend, prediction) for _, trend, prediction in results], failed, len(pending)

    def run_pass(
        self,
        now: Optional[datetime] = None,
        deadline_seconds: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PassReport:
        """Run one scoring pass and report what it produced."""
        start_time = time.monotonic()
        now = as_utc(now or self.clock())
        cancel = cancel or self.cancel_event
        deadline_seconds = deadline_seconds or self.config.deadline_seconds
        deadline = start_time + deadline_seconds if deadline_seconds else None

        since = now - timedelta(days=self.config.window_days)
        try:
            raw_posts = list(self.post_store.fetch_posts(since))
        except Exception as e:
            raise StoreUnavailableError("post", e) from e
        try:
            raw_candidates = list(
                self.trend_store.fetch_candidates(self.config.candidate_statuses, self.config.candidate_limit)
            )
        except Exception as e:
            raise StoreUnavailableError("trend", e) from e

        posts, skipped_posts = coerce_records(SocialPost, raw_posts, "post")
        candidates, skipped_trends = coerce_records(Trend, raw_candidates, "trend")
        posts.sort(key=lambda p: p.posted_at)
        logger.info(f"Starting scoring pass: {len(candidates)} candidates, {len(posts)} posts since {since.isoformat()}")

        social_metrics = aggregate_social_metrics(posts)
        try:
            results, failed, not_started = self._score_candidates(candidates, posts, now, cancel, deadline)
        finally:
            if cancel is self.cancel_event:
                self.cancel_event.clear()

        predictions = [prediction for _, prediction in results]
        insights = generate_market_insights(predictions, candidates)
        top = sorted(predictions, key=lambda p: p.confidence_score, reverse=True)[: self.config.top_predictions]

        report = PassReport(
            predictions_generated=len(predictions),
            candidates_analyzed=len(candidates),
            failed_candidates=failed,
            skipped_records=skipped_posts + skipped_trends,
            candidates_not_started=not_started,
            predictions=top,
            market_insights=insights,
            social_metrics=social_metrics,
            timestamp=self.clock(),
        )
        logger.info(
            f"Scoring pass finished in {time.monotonic() - start_time:.1f}s: "
            f"{report.predictions_generated} predictions, {failed} failed, {not_started} not started"
        )
        return report


def run_pass_payload(engine: TrendPredictionEngine, **kwargs: Any) -> Dict[str, Any]:
    """Run a pass and return a JSON-ready payload, success or structured error."""
    try:
        report = engine.run_pass(**kwargs)
    except TrendEngineError as e:
        logger.error(f"Scoring pass aborted: {e}")
        return {"success": False, "error": str(e)}
    return report.model_dump(mode="json")
