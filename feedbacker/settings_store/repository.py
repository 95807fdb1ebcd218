"""Key-value settings persisted in PostgreSQL as JSONB."""

import json
import logging
from typing import Any

from feedbacker.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS settings (
    key         TEXT PRIMARY KEY,
    value       JSONB NOT NULL,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


class SettingsRepository:
    """Get and upsert single settings values."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the settings table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Settings table ensured")

    async def get(self, key: str) -> Any | None:
        """Return the decoded value, or None when the key is absent."""
        raw = await self._db.fetchval("SELECT value FROM settings WHERE key = $1", key)
        if raw is None:
            return None
        # asyncpg hands JSONB back as text unless a codec is registered
        return json.loads(raw) if isinstance(raw, str) else raw

    async def set(self, key: str, value: Any) -> None:
        sql = """
            INSERT INTO settings (key, value, updated_at)
            VALUES ($1, $2::jsonb, NOW())
            ON CONFLICT (key) DO UPDATE
            SET value = EXCLUDED.value, updated_at = NOW()
        """
        await self._db.execute(sql, key, json.dumps(value))
