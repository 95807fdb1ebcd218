"""Tests for the process-wide service singletons."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from feedbacker.api import dependencies
from feedbacker.api.dependencies import (
    cleanup_dependencies,
    get_database,
    get_pipeline,
    get_settings_service,
)


class SlowDatabase:
    """Database stand-in whose connect yields to the event loop."""

    instances: list["SlowDatabase"] = []

    def __init__(self):
        self.connected = False
        self.close = AsyncMock()
        SlowDatabase.instances.append(self)

    async def connect(self):
        await asyncio.sleep(0.01)
        self.connected = True


@pytest.fixture
def slow_database():
    SlowDatabase.instances = []
    with patch("feedbacker.api.dependencies.Database", SlowDatabase):
        yield SlowDatabase


class TestSingletons:
    @pytest.mark.asyncio
    async def test_concurrent_first_calls_share_one_pipeline(self, slow_database):
        try:
            first, second = await asyncio.gather(get_pipeline(), get_pipeline())

            assert first is second
            assert first._limiter is second._limiter
            assert len(slow_database.instances) == 1
            assert await get_pipeline() is first
        finally:
            await cleanup_dependencies()

    @pytest.mark.asyncio
    async def test_database_published_only_when_connected(self, slow_database):
        try:
            databases = await asyncio.gather(get_database(), get_database(), get_database())

            assert all(db is databases[0] for db in databases)
            assert databases[0].connected
            assert len(slow_database.instances) == 1
        finally:
            await cleanup_dependencies()

    @pytest.mark.asyncio
    async def test_concurrent_settings_service(self, slow_database):
        try:
            first, second = await asyncio.gather(get_settings_service(), get_settings_service())
            assert first is second
        finally:
            await cleanup_dependencies()

    @pytest.mark.asyncio
    async def test_cleanup_resets_state(self, slow_database):
        await get_pipeline()
        database = dependencies._database

        await cleanup_dependencies()

        database.close.assert_awaited_once()
        assert dependencies._pipeline is None
        assert dependencies._database is None
