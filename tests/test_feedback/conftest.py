"""Shared fixtures for feedback tests."""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_database():
    """Create a mock Database with async methods."""
    db = AsyncMock()
    db.execute = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchrow = AsyncMock()
    db.fetchval = AsyncMock()
    return db


@pytest.fixture
def record_row(sample_record):
    """Database row (as a dict) matching ``sample_record``."""
    return {
        "id": sample_record.id,
        "shop_id": sample_record.shop_id,
        "device_id": sample_record.device_id,
        "is_anonymous": sample_record.is_anonymous,
        "audio_path": sample_record.audio_path,
        "transcript": sample_record.transcript,
        "sentiment": sample_record.sentiment,
        "emotion_score": 0.2000000029802322,
        "tags": list(sample_record.tags),
        "summary": sample_record.summary,
        "timestamp": sample_record.timestamp,
    }
