"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from feedbacker.api.app import create_app
from feedbacker.api.auth import verify_admin_key, verify_api_key
from feedbacker.api.dependencies import (
    get_audio_store,
    get_feedback_repository,
    get_pipeline,
    get_settings_service,
)
from feedbacker.feedback.schemas import FeedbackPage
from feedbacker.result import Ok


@pytest.fixture
def mock_repo(sample_record):
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=sample_record)
    repo.list_feedback = AsyncMock(return_value=FeedbackPage(items=[sample_record], next_offset=None))
    repo.count = AsyncMock(return_value=1)
    repo.list_for_shop = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_audio_store():
    store = MagicMock()
    store.clamp_ttl = MagicMock(
        side_effect=lambda ttl: max(60, min(3600 if ttl is None else ttl, 1_209_600))
    )
    store.sign = AsyncMock(return_value=Ok("https://bucket.test/signed?X-Amz-Signature=abc"))
    store.redirect = AsyncMock(return_value=Ok("https://bucket.test/short?X-Amz-Signature=def"))
    return store


@pytest.fixture
def mock_settings_service():
    service = AsyncMock()
    service.get_alert_threshold = AsyncMock(return_value=0.4)
    service.set_alert_threshold = AsyncMock()
    return service


@pytest.fixture
def mock_pipeline():
    pipeline = AsyncMock()
    return pipeline


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app, mock_repo, mock_audio_store, mock_settings_service, mock_pipeline):
    """TestClient with auth bypassed and every backend mocked."""
    app.dependency_overrides[verify_api_key] = lambda: "test-key"
    app.dependency_overrides[verify_admin_key] = lambda: "test-key"
    app.dependency_overrides[get_feedback_repository] = lambda: mock_repo
    app.dependency_overrides[get_audio_store] = lambda: mock_audio_store
    app.dependency_overrides[get_settings_service] = lambda: mock_settings_service
    app.dependency_overrides[get_pipeline] = lambda: mock_pipeline

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def wav_bytes(make_wav):
    """Factory returning WAV bytes of the given length."""

    def _make(seconds: float) -> bytes:
        return make_wav(seconds, name=f"clip-{seconds}.wav").read_bytes()

    return _make
