"""
PostgreSQL access for feedback records and settings.

One asyncpg pool per process. Repositories call the thin query
helpers below; nothing outside this module touches the pool directly.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any

import asyncpg

from feedbacker.config.settings import get_settings

logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT = 2.0


class Database:
    """
    Pooled asyncpg connection manager.

    Usage:
        async with Database() as db:
            await FeedbackRepository(db).create_table()

    Startup tolerates a database that is still coming up: ``connect``
    retries ``connect_attempts`` times with linear backoff before
    giving up.
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        connect_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        settings = get_settings()

        self._dsn = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._connect_attempts = max(1, connect_attempts)
        self._retry_delay = retry_delay

        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Create the pool, retrying transient connection failures."""
        for attempt in range(1, self._connect_attempts + 1):
            try:
                self._pool = await asyncpg.create_pool(
                    self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    command_timeout=30,
                )
            except (OSError, asyncpg.PostgresError) as e:
                if attempt == self._connect_attempts:
                    logger.error("Database connection failed after %d attempts: %s", attempt, e)
                    raise
                logger.warning("Database connection attempt %d failed: %s", attempt, e)
                await asyncio.sleep(self._retry_delay * attempt)
            else:
                logger.info("Database pool ready (%d-%d connections)", self._min_size, self._max_size)
                return

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database pool closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        async with self.pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement; returns the PostgreSQL status tag."""
        async with self.connection() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self.connection() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        async with self.connection() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.connection() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """True when ``SELECT 1`` answers within the health-check timeout."""
        try:
            result = await asyncio.wait_for(self.fetchval("SELECT 1"), HEALTH_CHECK_TIMEOUT)
        except (OSError, RuntimeError, asyncio.TimeoutError, asyncpg.PostgresError) as e:
            logger.warning("Database health check failed: %s", e)
            return False
        return result == 1
