"""Shared fixtures for pipeline tests."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from feedbacker.audio.store import StoredRef
from feedbacker.pipeline import IngestionPipeline, Submission
from feedbacker.ratelimit import RateLimitConfig, RateLimiter
from feedbacker.result import Ok
from feedbacker.sentiment import SentimentAnalyzer
from feedbacker.tagging import TagExtractor
from feedbacker.transcription import Transcript


@pytest.fixture
def mock_store():
    store = AsyncMock()
    store.put = AsyncMock(
        return_value=Ok(StoredRef(path="uploads/1-voice.webm", content_type="audio/webm", size=10))
    )
    store.sign = AsyncMock(return_value=Ok("https://bucket.test/uploads/1-voice.webm?sig=x"))
    return store


@pytest.fixture
def mock_transcriber():
    transcriber = AsyncMock()
    transcriber.transcribe = AsyncMock(
        return_value=Ok(Transcript(text="Размер не подходит, сидит плохо, хочу возврат"))
    )
    return transcriber


@pytest.fixture
def mock_repository():
    repo = AsyncMock()
    repo.save = AsyncMock(side_effect=lambda record: Ok(record))
    return repo


@pytest.fixture
def mock_dispatcher():
    dispatcher = AsyncMock()
    dispatcher.send = AsyncMock(return_value=1)
    return dispatcher


@pytest.fixture
def mock_settings():
    settings = AsyncMock()
    settings.get_alert_threshold = AsyncMock(return_value=0.3)
    return settings


@pytest.fixture
def metrics():
    return MagicMock()


@pytest.fixture
def limiter():
    return RateLimiter(RateLimitConfig(min_interval_ms=0))


@pytest.fixture
def pipeline(
    limiter, mock_store, mock_transcriber, mock_repository,
    mock_dispatcher, mock_settings, metrics,
):
    return IngestionPipeline(
        limiter=limiter,
        analyzer=SentimentAnalyzer([]),
        extractor=TagExtractor(),
        repository=mock_repository,
        store=mock_store,
        transcriber=mock_transcriber,
        dispatcher=mock_dispatcher,
        settings=mock_settings,
        metrics=metrics,
        probe=lambda path: 12.0,
    )


@pytest.fixture
def upload(tmp_path):
    """Factory for a submission backed by a real temp file."""

    def _make(shop_id="shop-7", device_id="kiosk-1", client_ip="10.0.0.1", **kwargs):
        path = tmp_path / f"feedback-{uuid.uuid4().hex}.webm"
        path.write_bytes(b"fake audio bytes")
        return Submission(
            shop_id=shop_id,
            file_path=path,
            filename="voice.webm",
            device_id=device_id,
            client_ip=client_ip,
            **kwargs,
        )

    return _make
