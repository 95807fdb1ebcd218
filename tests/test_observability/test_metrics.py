"""Tests for the Prometheus metrics collector."""

from prometheus_client import REGISTRY

from feedbacker.observability.metrics import get_metrics


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics() is get_metrics()

    def test_record_submission(self):
        metrics = get_metrics()
        before = _sample("feedbacker_submissions_total", outcome="accepted")
        metrics.record_submission("accepted")
        assert _sample("feedbacker_submissions_total", outcome="accepted") == before + 1

    def test_record_sentiment_attempt(self):
        metrics = get_metrics()
        before = _sample(
            "feedbacker_sentiment_attempts_total", backend="hf:test", outcome="failure"
        )
        metrics.record_sentiment_attempt("hf:test", success=False)
        after = _sample("feedbacker_sentiment_attempts_total", backend="hf:test", outcome="failure")
        assert after == before + 1

    def test_record_stage_latency(self):
        metrics = get_metrics()
        before = _sample("feedbacker_stage_latency_seconds_count", stage="store")
        metrics.record_stage_latency("store", 0.2)
        assert _sample("feedbacker_stage_latency_seconds_count", stage="store") == before + 1

    def test_record_rate_limited_and_alerts(self):
        metrics = get_metrics()
        rl_before = _sample("feedbacker_rate_limited_total", reason="rate_ip_window")
        alert_before = _sample(
            "feedbacker_alert_deliveries_total", channel="webhook", outcome="success"
        )

        metrics.record_rate_limited("rate_ip_window")
        metrics.record_alert_delivery("webhook", success=True)

        assert _sample("feedbacker_rate_limited_total", reason="rate_ip_window") == rl_before + 1
        assert (
            _sample("feedbacker_alert_deliveries_total", channel="webhook", outcome="success")
            == alert_before + 1
        )
