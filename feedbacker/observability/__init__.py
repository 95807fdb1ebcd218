"""Observability layer - logging and metrics."""

from feedbacker.observability.logging import setup_logging
from feedbacker.observability.metrics import MetricsCollector, get_metrics

__all__ = ["MetricsCollector", "get_metrics", "setup_logging"]
