"""Administratively editable settings with a short-TTL read cache.

Components:
- SettingsRepository: JSONB key-value table with upsert
- SettingsService: TTL cache and typed accessors (alert threshold)
- SettingsCacheConfig: Pydantic settings for the cache TTL
"""

from feedbacker.settings_store.repository import SettingsRepository
from feedbacker.settings_store.service import (
    ALERT_THRESHOLD_KEY,
    SettingsCacheConfig,
    SettingsService,
)

__all__ = [
    "ALERT_THRESHOLD_KEY",
    "SettingsCacheConfig",
    "SettingsRepository",
    "SettingsService",
]
