"""Shared fixtures for alert tests."""

from datetime import datetime, timezone

import httpx
import pytest

from feedbacker.alerts import Alert


@pytest.fixture
def sample_alert(sample_record):
    alert = Alert.from_record(
        sample_record,
        threshold=0.4,
        public_base_url="https://feedback.example.com/",
    )
    alert.created_at = datetime(2026, 2, 7, 12, 0, 5, tzinfo=timezone.utc)
    return alert


@pytest.fixture
def mock_response():
    def _make(status_code: int = 200) -> httpx.Response:
        return httpx.Response(status_code=status_code, request=httpx.Request("POST", "http://test"))

    return _make
