"""Read-through TTL cache over the settings table.

Reads within ``ttl_seconds`` of the last fetch are served from memory;
writes go to the database first and then refresh the cached entry.
Staleness across processes is therefore bounded by the TTL.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from feedbacker.settings_store.repository import SettingsRepository

logger = logging.getLogger(__name__)

ALERT_THRESHOLD_KEY = "alertThreshold"


class SettingsCacheConfig(BaseSettings):
    """Configuration for the settings cache."""

    model_config = SettingsConfigDict(
        env_prefix="SETTINGS_CACHE_",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: float = Field(
        default=60.0,
        ge=0.0,
        le=3600.0,
        description="How long a fetched value is served from memory",
    )


_MISSING = object()


class SettingsService:
    """Cached access to persisted settings.

    Args:
        repository: Backing store.
        config: Cache TTL.
        clock: Monotonic time source in seconds.
        default_threshold: Alert threshold used when none is stored.
    """

    def __init__(
        self,
        repository: SettingsRepository,
        config: SettingsCacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        default_threshold: float = 0.4,
    ) -> None:
        self._repo = repository
        self._config = config or SettingsCacheConfig()
        self._clock = clock
        self._default_threshold = default_threshold
        self._cache: dict[str, tuple[float, Any]] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        entry = self._cache.get(key, _MISSING)
        now = self._clock()
        if entry is not _MISSING and now - entry[0] < self._config.ttl_seconds:
            value = entry[1]
        else:
            value = await self._repo.get(key)
            self._cache[key] = (self._clock(), value)
        return default if value is None else value

    async def set(self, key: str, value: Any) -> None:
        await self._repo.set(key, value)
        self._cache[key] = (self._clock(), value)
        logger.info("Setting %s updated", key)

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    async def get_alert_threshold(self) -> float:
        """Current alert threshold in [0, 1]; falls back to the default."""
        try:
            raw = await self.get(ALERT_THRESHOLD_KEY)
        except Exception as e:
            logger.warning("Cannot read alert threshold, using default: %s", e)
            return self._default_threshold
        try:
            value = float(str(raw).replace(",", ".")) if raw is not None else None
        except ValueError:
            value = None
        if value is None or not (0.0 <= value <= 1.0):
            return self._default_threshold
        return value

    async def set_alert_threshold(self, value: float) -> None:
        if not (0.0 <= value <= 1.0):
            raise ValueError(f"Alert threshold {value} must be in [0, 1]")
        await self.set(ALERT_THRESHOLD_KEY, value)
