"""Tests for the command-line interface."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from feedbacker.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_db():
    db = MagicMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def database_cls(mock_db):
    """Patch Database so ``async with Database() as db`` yields mock_db."""
    with patch("feedbacker.storage.database.Database") as cls:
        instance = cls.return_value
        instance.__aenter__ = AsyncMock(return_value=mock_db)
        instance.__aexit__ = AsyncMock(return_value=False)
        yield cls


class TestInitDb:
    def test_creates_both_tables(self, runner, database_cls):
        with patch(
            "feedbacker.feedback.repository.FeedbackRepository.create_table", new_callable=AsyncMock
        ) as feedback_table, patch(
            "feedbacker.settings_store.repository.SettingsRepository.create_table",
            new_callable=AsyncMock,
        ) as settings_table:
            result = runner.invoke(main, ["init-db"])

        assert result.exit_code == 0, result.output
        assert "Database initialized successfully" in result.output
        feedback_table.assert_awaited_once()
        settings_table.assert_awaited_once()


class TestHealthCommand:
    def test_healthy(self, runner, database_cls):
        with patch(
            "feedbacker.api.routes.health.configured_providers",
            return_value={"storage": True, "transcription": False},
        ):
            result = runner.invoke(main, ["health"])

        assert result.exit_code == 0
        assert "Database healthy!" in result.output
        assert "storage_configured: True" in result.output
        assert "transcription_configured: False" in result.output

    def test_unhealthy(self, runner, database_cls, mock_db):
        mock_db.health_check.return_value = False
        with patch("feedbacker.api.routes.health.configured_providers", return_value={}):
            result = runner.invoke(main, ["health"])

        assert result.exit_code == 1
        assert "Database unhealthy!" in result.output

    def test_connection_error(self, runner, database_cls):
        database_cls.return_value.__aenter__.side_effect = OSError("refused")
        with patch("feedbacker.api.routes.health.configured_providers", return_value={}):
            result = runner.invoke(main, ["health"])

        assert result.exit_code == 1
        assert "postgres: False" in result.output


class TestServe:
    def test_starts_metrics_and_uvicorn(self, runner):
        metrics = MagicMock()
        with patch("feedbacker.cli.get_metrics", return_value=metrics), patch(
            "uvicorn.run"
        ) as run:
            result = runner.invoke(main, ["serve", "--port", "9100", "--metrics-port", "9101"])

        assert result.exit_code == 0, result.output
        metrics.start_server.assert_called_once_with(port=9101)
        args, kwargs = run.call_args
        assert args[0] == "feedbacker.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9100
        assert "Starting API server" in result.output
