"""Manager notifications for newly persisted feedback.

Components:
- Alert: Rendered notification (severity, excerpt, links)
- NotificationChannel / TelegramChannel / WebhookChannel: Delivery targets
- CircuitBreaker: Skips channels that keep failing
- AlertDispatcher: Fan-out that reports a delivered count and never raises
- AlertConfig: Pydantic settings for recipients and timeouts
"""

from feedbacker.alerts.channels import (
    CircuitBreaker,
    CircuitState,
    NotificationChannel,
    TelegramChannel,
    WebhookChannel,
)
from feedbacker.alerts.config import AlertConfig
from feedbacker.alerts.dispatcher import AlertDispatcher, build_channels
from feedbacker.alerts.schemas import Alert, excerpt, severity_for

__all__ = [
    "Alert",
    "AlertConfig",
    "AlertDispatcher",
    "CircuitBreaker",
    "CircuitState",
    "NotificationChannel",
    "TelegramChannel",
    "WebhookChannel",
    "build_channels",
    "excerpt",
    "severity_for",
]
