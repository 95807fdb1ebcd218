"""Ingestion pipeline: one uploaded recording in, one persisted record out.

Stages run in order and stop at the first refusal:

    shop id → rate limit → duration → store → sign → transcribe
    → sentiment + tags/summary → merge/escalate → save → alert (async)

Nothing after ``save`` can turn an accepted submission into a rejected
one. The uploaded temp file is deleted exactly once on every path.
"""

import asyncio
import os
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog
from fastapi.concurrency import run_in_threadpool

from feedbacker.alerts.dispatcher import AlertDispatcher
from feedbacker.audio.config import AudioConfig
from feedbacker.audio.store import AudioStore
from feedbacker.audio.validation import probe_duration, validate_duration
from feedbacker.feedback.repository import FeedbackRepository
from feedbacker.feedback.schemas import FeedbackRecord
from feedbacker.observability.metrics import MetricsCollector
from feedbacker.pipeline.merge import merge
from feedbacker.pipeline.outcomes import (
    Accepted,
    Outcome,
    Rejected,
    RejectReason,
    Submission,
)
from feedbacker.ratelimit.limiter import RateLimiter
from feedbacker.result import Err
from feedbacker.sentiment.service import SentimentAnalyzer
from feedbacker.settings_store.service import SettingsService
from feedbacker.tagging.extractor import TagExtractor
from feedbacker.transcription.client import Transcriber

logger = structlog.get_logger(__name__)


class IngestionPipeline:
    """Orchestrates validation, storage, annotation and persistence.

    All collaborators are injected; ``store``, ``transcriber``,
    ``dispatcher`` and ``settings`` may be None when the corresponding
    provider is not configured.
    """

    def __init__(
        self,
        *,
        limiter: RateLimiter,
        analyzer: SentimentAnalyzer,
        extractor: TagExtractor,
        repository: FeedbackRepository,
        store: AudioStore | None = None,
        transcriber: Transcriber | None = None,
        dispatcher: AlertDispatcher | None = None,
        settings: SettingsService | None = None,
        audio_config: AudioConfig | None = None,
        metrics: MetricsCollector | None = None,
        probe: Callable[[Path], float | None] = probe_duration,
    ) -> None:
        self._limiter = limiter
        self._analyzer = analyzer
        self._extractor = extractor
        self._repo = repository
        self._store = store
        self._transcriber = transcriber
        self._dispatcher = dispatcher
        self._settings = settings
        self._audio_config = audio_config or AudioConfig()
        self._metrics = metrics
        self._probe = probe
        self._alert_tasks: set[asyncio.Task] = set()

    async def process(self, submission: Submission) -> Outcome:
        """Run one submission through every stage.

        Returns:
            Accepted with the stored record, or Rejected with the reason.
        """
        try:
            outcome = await self._run(submission)
        finally:
            self._cleanup(submission.file_path)

        if self._metrics is not None:
            label = "accepted" if isinstance(outcome, Accepted) else outcome.reason.value
            self._metrics.record_submission(label)
        if isinstance(outcome, Rejected):
            logger.info(
                "submission_rejected",
                reason=outcome.reason.value,
                rate_reason=outcome.rate_reason,
                detail=outcome.detail,
                shop_id=submission.shop_id,
            )
        return outcome

    async def _run(self, sub: Submission) -> Outcome:
        shop_id = (sub.shop_id or "").strip()
        if not shop_id:
            return Rejected.of(RejectReason.MISSING_SHOP_ID)

        decision = self._limiter.check(sub.client_ip, sub.device_id)
        if not decision.allowed:
            if self._metrics is not None:
                self._metrics.record_rate_limited(decision.reason or "unknown")
            return Rejected(
                reason=RejectReason.RATE_LIMITED,
                message=decision.message,
                rate_reason=decision.reason,
                retry_after=decision.retry_after,
            )

        with self._timed("validate"):
            duration = await run_in_threadpool(self._probe, sub.file_path)
        checked = validate_duration(duration, self._audio_config)
        if isinstance(checked, Err):
            return Rejected(
                reason=RejectReason.INVALID_DURATION,
                message=checked.detail,
                detail=checked.kind,
            )

        if self._store is None:
            return Rejected.of(RejectReason.STORAGE_FAILURE, "storage is not configured")
        with self._timed("store"):
            stored = await self._store.put(sub.file_path, sub.filename)
        if isinstance(stored, Err):
            return Rejected.of(RejectReason.STORAGE_FAILURE, stored.detail)
        audio_path = stored.value.path

        signed = await self._store.sign(audio_path)
        if isinstance(signed, Err):
            return Rejected.of(RejectReason.STORAGE_FAILURE, signed.detail)

        if self._transcriber is None:
            return Rejected.of(RejectReason.EMPTY_TRANSCRIPT, "transcription is not configured")
        with self._timed("transcribe"):
            transcribed = await self._transcriber.transcribe(signed.value)
        if isinstance(transcribed, Err):
            return Rejected.of(
                RejectReason.EMPTY_TRANSCRIPT,
                f"{transcribed.kind}: {transcribed.detail}",
            )
        transcript = transcribed.value
        if transcript.is_empty:
            return Rejected.of(RejectReason.EMPTY_TRANSCRIPT, "empty text")
        text = transcript.text.strip()

        with self._timed("analyze"):
            sentiment = await self._analyzer.analyze(text)
            extraction = self._extractor.extract(text)
            flags = self._extractor.red_flags(text)
        annotation = merge(sentiment, extraction, flags, self._extractor)

        record = FeedbackRecord(
            shop_id=shop_id,
            audio_path=audio_path,
            transcript=text,
            sentiment=annotation.sentiment,
            emotion_score=annotation.emotion_score,
            tags=annotation.tags,
            summary=annotation.summary,
            device_id=sub.device_id,
            is_anonymous=sub.is_anonymous,
        )
        with self._timed("save"):
            saved = await self._repo.save(record)
        if isinstance(saved, Err):
            # the uploaded object stays orphaned in storage
            return Rejected.of(RejectReason.SAVE_FAILURE, saved.detail)

        record = saved.value
        logger.info(
            "feedback_saved",
            feedback_id=record.id,
            shop_id=record.shop_id,
            sentiment=record.sentiment,
            emotion_score=record.emotion_score,
            tags=record.tags,
            escalated=annotation.escalated,
            sentiment_source=sentiment.source,
        )
        self._schedule_alert(record)
        return Accepted(record=record)

    def _schedule_alert(self, record: FeedbackRecord) -> None:
        if self._dispatcher is None:
            return
        task = asyncio.create_task(self._alert(record))
        self._alert_tasks.add(task)
        task.add_done_callback(self._alert_tasks.discard)

    async def _alert(self, record: FeedbackRecord) -> None:
        try:
            threshold = None
            if self._settings is not None:
                threshold = await self._settings.get_alert_threshold()
            delivered = await self._dispatcher.send(record, threshold)
        except Exception as e:
            logger.error("alert_failed", feedback_id=record.id, error=str(e))
            return
        if delivered == 0:
            logger.warning("alert_not_delivered", feedback_id=record.id)
        else:
            logger.info("alert_sent", feedback_id=record.id, delivered=delivered)

    async def drain(self) -> None:
        """Wait for in-flight alert deliveries (shutdown and tests)."""
        if self._alert_tasks:
            await asyncio.gather(*list(self._alert_tasks), return_exceptions=True)

    @staticmethod
    def _cleanup(path: Path) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("temp_cleanup_failed", path=str(path), error=str(e))

    @contextmanager
    def _timed(self, stage: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            if self._metrics is not None:
                self._metrics.record_stage_latency(stage, time.perf_counter() - start)
