"""Notification channel implementations for alert delivery.

Provides an ABC for notification channels plus concrete implementations
for Telegram chats and generic JSON webhooks. A CircuitBreaker decorator
wraps any channel so an unhealthy recipient is skipped quickly instead
of costing a full timeout on every submission.
"""

import enum
import html
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import httpx

from feedbacker.alerts.schemas import Alert

logger = logging.getLogger(__name__)


class NotificationChannel(ABC):
    """Abstract base for notification delivery channels."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier for this channel (e.g. 'telegram:12345', 'webhook')."""

    @abstractmethod
    async def send(self, alert: Alert) -> bool:
        """Deliver an alert through this channel.

        Returns:
            True if delivery succeeded, False otherwise.
        """


class WebhookChannel(NotificationChannel):
    """Delivers alerts as JSON POST to an arbitrary HTTP endpoint."""

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 8.0,
    ) -> None:
        self._url = url
        self._headers = headers or {}
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "webhook"

    async def send(self, alert: Alert) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._url,
                    json=alert.to_dict(),
                    headers=self._headers,
                )
                if resp.is_success:
                    return True
                logger.warning(
                    "Webhook returned %d for feedback %s",
                    resp.status_code, alert.feedback_id,
                )
                return False
        except httpx.TimeoutException:
            logger.warning("Webhook timed out for feedback %s", alert.feedback_id)
            return False
        except Exception as e:
            logger.warning(
                "Webhook failed for feedback %s: %s", alert.feedback_id, e,
            )
            return False


class TelegramChannel(NotificationChannel):
    """Delivers alerts to one Telegram chat via the Bot API ``sendMessage``.

    Messages use HTML parse mode; every interpolated value is escaped.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 8.0,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    @property
    def name(self) -> str:
        return f"telegram:{self._chat_id}"

    def _format_message(self, alert: Alert) -> str:
        esc = html.escape
        lines = [
            f"{alert.icon} <b>{esc(alert.title)}</b>",
            f"Магазин: <b>{esc(alert.shop_id)}</b>"
            + (f" · устройство {esc(alert.device_id)}" if alert.device_id else ""),
            f"Тональность: {esc(alert.sentiment)} ({alert.emotion_score:.2f})",
            f"Теги: {esc(', '.join(alert.tags))}",
        ]
        if alert.summary:
            lines.append(f"Кратко: {esc(alert.summary)}")
        if alert.transcript_excerpt:
            lines.append(f"<i>{esc(alert.transcript_excerpt)}</i>")
        lines.append(
            f'<a href="{esc(alert.full_url, quote=True)}">Полный отзыв</a> · '
            f'<a href="{esc(alert.audio_url, quote=True)}">Аудио</a>'
        )
        return "\n".join(lines)

    async def send(self, alert: Alert) -> bool:
        url = f"{self._api_base}/bot{self._bot_token}/sendMessage"
        payload = {
            "chat_id": self._chat_id,
            "text": self._format_message(alert),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=payload)
                if resp.is_success:
                    return True
                # never log the URL: it carries the bot token
                logger.warning(
                    "Telegram returned %d for chat %s, feedback %s",
                    resp.status_code, self._chat_id, alert.feedback_id,
                )
                return False
        except httpx.TimeoutException:
            logger.warning(
                "Telegram timed out for chat %s, feedback %s",
                self._chat_id, alert.feedback_id,
            )
            return False
        except Exception as e:
            logger.warning(
                "Telegram failed for chat %s, feedback %s: %s",
                self._chat_id, alert.feedback_id, type(e).__name__,
            )
            return False


class CircuitState(enum.Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker(NotificationChannel):
    """Wraps a NotificationChannel with circuit breaker protection.

    State machine: CLOSED → OPEN → HALF_OPEN → CLOSED.

    - CLOSED: sends pass through; consecutive failures are counted.
    - OPEN: sends are refused until ``recovery_timeout`` has elapsed.
    - HALF_OPEN: one probe is allowed. Success closes, failure reopens.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._channel = channel
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_time: float = 0.0

    @property
    def name(self) -> str:
        return self._channel.name

    @property
    def state(self) -> CircuitState:
        return self._state

    async def send(self, alert: Alert) -> bool:
        if self._state == CircuitState.OPEN:
            if self._clock() - self._last_failure_time >= self._recovery_timeout:
                self._state = CircuitState.HALF_OPEN
                logger.info("Circuit breaker %s: OPEN → HALF_OPEN", self.name)
            else:
                logger.debug(
                    "Circuit breaker %s: OPEN, skipping feedback %s",
                    self.name, alert.feedback_id,
                )
                return False

        try:
            success = await self._channel.send(alert)
        except Exception as e:
            logger.warning("Channel %s raised: %s", self.name, e)
            success = False

        if success:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("Circuit breaker %s: HALF_OPEN → CLOSED", self.name)
            self._state = CircuitState.CLOSED
            self._consecutive_failures = 0
            return True

        self._consecutive_failures += 1
        self._last_failure_time = self._clock()
        if self._state == CircuitState.HALF_OPEN:
            self._state = CircuitState.OPEN
            logger.warning("Circuit breaker %s: HALF_OPEN → OPEN", self.name)
        elif self._consecutive_failures >= self._failure_threshold:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit breaker %s: CLOSED → OPEN after %d failures",
                self.name, self._consecutive_failures,
            )
        return False
