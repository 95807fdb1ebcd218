"""Alert delivery configuration.

Recipients, timeouts and circuit breaker tuning. All settings can be
overridden via ``ALERTS_*`` environment variables.
"""

import re

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_SPLIT_RE = re.compile(r"[,\s]+")


def split_list(raw: str) -> list[str]:
    """Split a comma- or whitespace-separated value, dropping blanks."""
    return [part for part in _SPLIT_RE.split(raw or "") if part]


class AlertConfig(BaseSettings):
    """Configuration for manager notifications."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTS_",
        case_sensitive=False,
        extra="ignore",
    )

    telegram_bot_token: str = Field(
        default="",
        description="Telegram Bot API token; empty disables Telegram",
    )
    telegram_chat_ids: str = Field(
        default="",
        description="Comma- or whitespace-separated chat ids",
    )
    telegram_api_base: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL",
    )
    webhook_urls: str = Field(
        default="",
        description="Comma- or whitespace-separated JSON webhook endpoints",
    )
    timeout_seconds: float = Field(
        default=8.0,
        gt=0.0,
        le=60.0,
        description="Per-request timeout for a single delivery",
    )
    default_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Score at or below which a negative record is critical",
    )
    transcript_excerpt_chars: int = Field(
        default=400,
        ge=50,
        le=4000,
        description="Maximum transcript excerpt length in a notification",
    )
    transcript_excerpt_lines: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Maximum transcript excerpt line count",
    )
    circuit_breaker_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before a channel's circuit opens",
    )
    circuit_breaker_recovery_seconds: float = Field(
        default=60.0,
        ge=1.0,
        description="Seconds before an open circuit probes recovery",
    )

    @property
    def chat_ids(self) -> list[str]:
        return split_list(self.telegram_chat_ids)

    @property
    def webhooks(self) -> list[str]:
        return split_list(self.webhook_urls)

    @property
    def configured(self) -> bool:
        return bool((self.telegram_bot_token and self.chat_ids) or self.webhooks)
