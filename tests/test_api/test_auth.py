"""Tests for API key authentication."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from feedbacker.api.dependencies import (
    get_audio_store,
    get_feedback_repository,
    get_settings_service,
)
from feedbacker.config.settings import Settings


@pytest.fixture
def auth_client(app, mock_repo, mock_audio_store, mock_settings_service):
    """TestClient with real key checks and mocked backends."""
    app.dependency_overrides[get_feedback_repository] = lambda: mock_repo
    app.dependency_overrides[get_audio_store] = lambda: mock_audio_store
    app.dependency_overrides[get_settings_service] = lambda: mock_settings_service

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def _settings(**kwargs):
    return patch("feedbacker.api.auth.get_settings", return_value=Settings(**kwargs))


class TestApiKey:
    def test_missing_key(self, auth_client):
        with _settings(api_keys="k1,k2"):
            resp = auth_client.get("/feedback/shop-7")

        assert resp.status_code == 401
        assert resp.json() == {"error": "Missing API key. Provide X-API-KEY header."}

    def test_invalid_key(self, auth_client):
        with _settings(api_keys="k1,k2"):
            resp = auth_client.get("/feedback/shop-7", headers={"X-API-KEY": "nope"})
        assert resp.status_code == 401

    def test_valid_key(self, auth_client):
        with _settings(api_keys="k1, k2"):
            resp = auth_client.get("/feedback/shop-7", headers={"X-API-KEY": "k2"})
        assert resp.status_code == 200

    def test_dev_mode_without_keys(self, auth_client):
        with _settings(api_keys=None):
            resp = auth_client.get("/feedback/shop-7")
        assert resp.status_code == 200

    def test_capability_links_need_no_key(self, auth_client, sample_record):
        with _settings(api_keys="k1"):
            full = auth_client.get(f"/feedback/{sample_record.id}/full")
            redirect = auth_client.get(
                f"/feedback/{sample_record.id}/redirect-audio", follow_redirects=False
            )

        assert full.status_code == 200
        assert redirect.status_code == 307


class TestAdminKey:
    def test_admin_key_required(self, auth_client):
        with _settings(api_keys="k1", admin_api_keys="adm"):
            regular = auth_client.get("/admin/settings", headers={"X-API-KEY": "k1"})
            admin = auth_client.get("/admin/settings", headers={"X-API-KEY": "adm"})

        assert regular.status_code == 401
        assert admin.status_code == 200

    def test_falls_back_to_api_keys(self, auth_client):
        with _settings(api_keys="k1", admin_api_keys=None):
            resp = auth_client.get("/admin/settings", headers={"X-API-KEY": "k1"})
        assert resp.status_code == 200

    def test_admin_key_not_valid_for_submissions_feed(self, auth_client):
        with _settings(api_keys="k1", admin_api_keys="adm"):
            resp = auth_client.get("/feedback/shop-7", headers={"X-API-KEY": "adm"})
        assert resp.status_code == 401
