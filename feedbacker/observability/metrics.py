"""
Prometheus metrics for the feedback ingestion service.

Defines and exposes metrics for:
- Submission outcomes (accepted / rejected by reason)
- Per-stage pipeline latency
- Sentiment backend attempts
- Rate-limit rejections
- Alert delivery results

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from feedbacker.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for stage latency (in seconds); transcription polls can run minutes
STAGE_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 180.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the ingestion pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_submission("accepted")
        metrics.record_stage_latency("transcribe", 12.4)
    """

    def __init__(self):
        self.submissions = Counter(
            "feedbacker_submissions_total",
            "Feedback submissions by outcome",
            ["outcome"],  # accepted, or a reject reason
        )

        self.stage_latency = Histogram(
            "feedbacker_stage_latency_seconds",
            "Time spent in each pipeline stage",
            ["stage"],  # validate, store, transcribe, analyze, persist
            buckets=STAGE_BUCKETS,
        )

        self.sentiment_attempts = Counter(
            "feedbacker_sentiment_attempts_total",
            "Sentiment backend attempts",
            ["backend", "outcome"],  # outcome: success, failure
        )

        self.rate_limited = Counter(
            "feedbacker_rate_limited_total",
            "Requests rejected by the rate limiter",
            ["reason"],
        )

        self.alert_deliveries = Counter(
            "feedbacker_alert_deliveries_total",
            "Alert delivery attempts by channel",
            ["channel", "outcome"],
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    # Convenience methods

    def record_submission(self, outcome: str) -> None:
        self.submissions.labels(outcome=outcome).inc()

    def record_stage_latency(self, stage: str, latency: float) -> None:
        self.stage_latency.labels(stage=stage).observe(latency)

    def record_sentiment_attempt(self, backend: str, success: bool) -> None:
        self.sentiment_attempts.labels(
            backend=backend,
            outcome="success" if success else "failure",
        ).inc()

    def record_rate_limited(self, reason: str) -> None:
        self.rate_limited.labels(reason=reason).inc()

    def record_alert_delivery(self, channel: str, success: bool) -> None:
        self.alert_deliveries.labels(
            channel=channel,
            outcome="success" if success else "failure",
        ).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
