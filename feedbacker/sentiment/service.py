"""
Sentiment analysis over an ordered chain of backends.

Backends are attempted in order, each under its own timeout. The first
success is returned and promoted to the front of the chain so later
calls try it first. When every backend fails, or none is configured,
the lexical heuristic answers, so ``analyze`` always returns a result.
"""

import asyncio
import logging
import time

from feedbacker.observability.metrics import MetricsCollector
from feedbacker.sentiment.backends import SentimentBackend, build_backends
from feedbacker.sentiment.chain import FallbackChain
from feedbacker.sentiment.config import SentimentConfig
from feedbacker.sentiment.heuristic import heuristic_sentiment
from feedbacker.sentiment.normalize import reconcile, round2
from feedbacker.sentiment.schemas import NEUTRAL, SentimentResult

logger = logging.getLogger(__name__)


class SentimentAnalyzer:
    """
    Transcript sentiment with remote-first, heuristic-last fallback.

    The chain order is per-instance state; build one analyzer per
    process and share it through the pipeline's dependencies.

    Usage:
        analyzer = SentimentAnalyzer.from_config(SentimentConfig())
        result = await analyzer.analyze("Всё отлично, спасибо")
        result.sentiment, result.emotion_score
    """

    def __init__(
        self,
        backends: list[SentimentBackend] | None = None,
        timeout_seconds: float = 8.0,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._chain: FallbackChain[SentimentBackend] = FallbackChain(backends or [])
        self._timeout = timeout_seconds
        self._metrics = metrics

    @classmethod
    def from_config(
        cls,
        config: SentimentConfig | None = None,
        metrics: MetricsCollector | None = None,
    ) -> "SentimentAnalyzer":
        config = config or SentimentConfig()
        backends = build_backends(config)
        if not backends:
            logger.info("No sentiment backends configured, using heuristic only")
        return cls(backends, timeout_seconds=config.timeout_seconds, metrics=metrics)

    @property
    def chain(self) -> FallbackChain[SentimentBackend]:
        return self._chain

    async def analyze(self, text: str | None) -> SentimentResult:
        """Classify text. Never raises."""
        if not text or not text.strip():
            return SentimentResult(sentiment=NEUTRAL, emotion_score=0.5)

        for backend in self._chain.snapshot():
            result = await self._attempt(backend, text)
            if result is not None:
                self._chain.promote(backend)
                return result

        if len(self._chain):
            logger.warning(
                "All %d sentiment backends failed, using heuristic", len(self._chain)
            )
        return heuristic_sentiment(text)

    async def _attempt(
        self,
        backend: SentimentBackend,
        text: str,
    ) -> SentimentResult | None:
        start = time.perf_counter()
        try:
            raw = await asyncio.wait_for(backend.classify(text), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Sentiment backend %s timed out after %.1fs", backend.name, self._timeout)
            self._record(backend, False)
            return None
        except Exception as e:
            logger.warning("Sentiment backend %s failed: %s", backend.name, e)
            self._record(backend, False)
            return None

        self._record(backend, True)
        score = round2(raw.emotion_score)
        result = SentimentResult(
            sentiment=reconcile(raw.sentiment, score),
            emotion_score=score,
            source=raw.source,
        )
        logger.debug(
            "Sentiment from %s: %s (%.2f) in %.0fms",
            backend.name, result.sentiment, result.emotion_score,
            (time.perf_counter() - start) * 1000,
        )
        return result

    def _record(self, backend: SentimentBackend, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_sentiment_attempt(backend.name, success)
