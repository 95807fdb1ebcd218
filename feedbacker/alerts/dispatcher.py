"""Notification dispatcher fanning one feedback record out to all recipients.

Every configured channel is attempted even when earlier ones fail, and
``send`` never raises: the submitter's request must not depend on
whether managers were reachable. There is no retry inside a request.
"""

import logging

from feedbacker.alerts.channels import (
    CircuitBreaker,
    NotificationChannel,
    TelegramChannel,
    WebhookChannel,
)
from feedbacker.alerts.config import AlertConfig
from feedbacker.alerts.schemas import Alert
from feedbacker.feedback.schemas import FeedbackRecord
from feedbacker.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)


def build_channels(config: AlertConfig) -> list[NotificationChannel]:
    """Create one channel per Telegram chat id and per webhook URL."""
    channels: list[NotificationChannel] = []
    if config.telegram_bot_token:
        for chat_id in config.chat_ids:
            channels.append(
                TelegramChannel(
                    bot_token=config.telegram_bot_token,
                    chat_id=chat_id,
                    api_base=config.telegram_api_base,
                    timeout=config.timeout_seconds,
                )
            )
    for url in config.webhooks:
        channels.append(WebhookChannel(url=url, timeout=config.timeout_seconds))
    return channels


class AlertDispatcher:
    """Formats and delivers alerts for persisted feedback records.

    Wraps each channel in a CircuitBreaker.
    """

    def __init__(
        self,
        channels: list[NotificationChannel],
        config: AlertConfig | None = None,
        public_base_url: str = "http://localhost:8001",
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._config = config or AlertConfig()
        self._public_base_url = public_base_url
        self._metrics = metrics

        self._channels: list[CircuitBreaker] = []
        for ch in channels:
            if isinstance(ch, CircuitBreaker):
                self._channels.append(ch)
            else:
                self._channels.append(
                    CircuitBreaker(
                        channel=ch,
                        failure_threshold=self._config.circuit_breaker_threshold,
                        recovery_timeout=self._config.circuit_breaker_recovery_seconds,
                    )
                )

    @classmethod
    def from_config(
        cls,
        config: AlertConfig,
        public_base_url: str,
        metrics: MetricsCollector | None = None,
    ) -> "AlertDispatcher":
        return cls(build_channels(config), config, public_base_url, metrics)

    @property
    def channels(self) -> list[CircuitBreaker]:
        return self._channels

    def build_alert(self, record: FeedbackRecord, threshold: float | None = None) -> Alert:
        if threshold is None:
            threshold = self._config.default_threshold
        return Alert.from_record(
            record,
            threshold=threshold,
            public_base_url=self._public_base_url,
            excerpt_chars=self._config.transcript_excerpt_chars,
            excerpt_lines=self._config.transcript_excerpt_lines,
        )

    async def send(self, record: FeedbackRecord, threshold: float | None = None) -> int:
        """Send an alert for ``record`` to every channel.

        Args:
            record: Persisted feedback record.
            threshold: Alert threshold; only affects severity and title.

        Returns:
            Number of channels that accepted the alert.
        """
        if not self._channels:
            logger.debug("No alert channels configured, skipping %s", record.id)
            return 0

        try:
            alert = self.build_alert(record, threshold)
        except Exception as e:
            logger.error("Failed to build alert for feedback %s: %s", record.id, e)
            return 0

        results: list[tuple[str, bool]] = []
        for channel in self._channels:
            try:
                ok = await channel.send(alert)
            except Exception as e:
                logger.warning("Channel %s send error: %s", channel.name, e)
                ok = False
            results.append((channel.name, ok))
            if self._metrics is not None:
                self._metrics.record_alert_delivery(channel.name.split(":")[0], ok)

        self._record_delivery(alert, results)
        return sum(1 for _, ok in results if ok)

    def _record_delivery(self, alert: Alert, results: list[tuple[str, bool]]) -> None:
        successes = [name for name, ok in results if ok]
        failures = [name for name, ok in results if not ok]

        if failures and not successes:
            logger.error(
                "Alert for feedback %s (%s) failed ALL channels: %s",
                alert.feedback_id, alert.severity, failures,
            )
        elif failures:
            logger.warning(
                "Alert for feedback %s partial delivery: ok=%s failed=%s",
                alert.feedback_id, successes, failures,
            )
        else:
            logger.info(
                "Alert for feedback %s delivered to %d channel(s)",
                alert.feedback_id, len(successes),
            )
