"""Tests for FeedbackRepository."""

from datetime import datetime, timezone

import pytest

from feedbacker.feedback import FeedbackFilter, FeedbackRepository, is_valid_id
from feedbacker.result import Err, Ok


@pytest.fixture
def repo(mock_database):
    return FeedbackRepository(mock_database)


class TestCreateTable:
    @pytest.mark.asyncio
    async def test_create_table(self, repo, mock_database):
        await repo.create_table()
        sql = mock_database.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS feedback" in sql
        assert "idx_feedback_shop_ts" in sql


class TestSave:
    """Insert-only persistence."""

    @pytest.mark.asyncio
    async def test_save_returns_stored_record(self, repo, mock_database, sample_record, record_row):
        mock_database.fetchrow.return_value = record_row

        result = await repo.save(sample_record)

        assert isinstance(result, Ok)
        assert result.value.id == sample_record.id
        # REAL column noise is rounded away
        assert result.value.emotion_score == 0.2
        assert result.value.tags == ["размер", "посадка", "возврат"]

        call_args = mock_database.fetchrow.call_args[0]
        assert "INSERT INTO feedback" in call_args[0]
        assert "RETURNING *" in call_args[0]
        assert call_args[1] == sample_record.id
        assert call_args[2] == "shop-7"
        assert call_args[3] == "kiosk-1"
        assert call_args[4] is False
        assert call_args[9] == ["размер", "посадка", "возврат"]
        assert call_args[11] == sample_record.timestamp

    @pytest.mark.asyncio
    async def test_database_error_is_err(self, repo, mock_database, sample_record):
        mock_database.fetchrow.side_effect = ConnectionError("connection reset")

        result = await repo.save(sample_record)

        assert isinstance(result, Err)
        assert result.kind == "save_failure"
        assert "connection reset" in result.detail

    @pytest.mark.asyncio
    async def test_no_row_is_err(self, repo, mock_database, sample_record):
        mock_database.fetchrow.return_value = None
        result = await repo.save(sample_record)
        assert result.kind == "save_failure"


class TestGetById:
    @pytest.mark.asyncio
    async def test_found(self, repo, mock_database, sample_record, record_row):
        mock_database.fetchrow.return_value = record_row

        record = await repo.get_by_id(sample_record.id)

        assert record.shop_id == "shop-7"
        assert mock_database.fetchrow.call_args[0][1] == sample_record.id

    @pytest.mark.asyncio
    async def test_not_found(self, repo, mock_database, sample_record):
        mock_database.fetchrow.return_value = None
        assert await repo.get_by_id(sample_record.id) is None

    @pytest.mark.asyncio
    async def test_malformed_id_skips_query(self, repo, mock_database):
        assert await repo.get_by_id("not-a-uuid") is None
        mock_database.fetchrow.assert_not_called()


class TestListFeedback:
    """Filtered, paginated admin listing."""

    @pytest.mark.asyncio
    async def test_no_filters(self, repo, mock_database):
        page = await repo.list_feedback(FeedbackFilter(limit=20))

        sql = mock_database.fetch.call_args[0][0]
        assert "WHERE" not in sql
        assert "ORDER BY timestamp DESC" in sql
        assert "LIMIT $1 OFFSET $2" in sql
        assert mock_database.fetch.call_args[0][1:] == (20, 0)
        assert page.items == []
        assert page.next_offset is None

    @pytest.mark.asyncio
    async def test_all_filters(self, repo, mock_database):
        since = datetime(2026, 2, 1, tzinfo=timezone.utc)
        await repo.list_feedback(
            FeedbackFilter(shop_id="shop-7", sentiment="negative", since=since, limit=5, offset=10)
        )

        call_args = mock_database.fetch.call_args[0]
        sql = call_args[0]
        assert "shop_id = $1" in sql
        assert "sentiment = $2" in sql
        assert "timestamp >= $3" in sql
        assert "LIMIT $4 OFFSET $5" in sql
        assert call_args[1:] == ("shop-7", "negative", since, 5, 10)

    @pytest.mark.asyncio
    async def test_full_page_sets_next_offset(self, repo, mock_database, record_row):
        mock_database.fetch.return_value = [record_row, record_row]

        page = await repo.list_feedback(FeedbackFilter(limit=2, offset=4))

        assert len(page.items) == 2
        assert page.next_offset == 6

    @pytest.mark.asyncio
    async def test_count(self, repo, mock_database):
        mock_database.fetchval.return_value = 42

        total = await repo.count(FeedbackFilter(sentiment="positive"))

        assert total == 42
        call_args = mock_database.fetchval.call_args[0]
        assert "SELECT COUNT(*) FROM feedback" in call_args[0]
        assert call_args[1] == "positive"


class TestListForShop:
    @pytest.mark.asyncio
    async def test_feed_items(self, repo, mock_database, sample_record):
        since = datetime(2026, 1, 1, tzinfo=timezone.utc)
        mock_database.fetch.return_value = [
            {
                "id": sample_record.id,
                "timestamp": sample_record.timestamp,
                "sentiment": "negative",
                "emotion_score": 0.2,
            }
        ]

        items = await repo.list_for_shop("shop-7", since, 50)

        assert items[0].id == sample_record.id
        assert items[0].emotion_score == 0.2
        assert mock_database.fetch.call_args[0][1:] == ("shop-7", since, 50)


class TestIsValidId:
    def test_valid(self, sample_record):
        assert is_valid_id(sample_record.id)

    @pytest.mark.parametrize("value", ["", "abc", "123", "../etc/passwd"])
    def test_invalid(self, value):
        assert not is_valid_id(value)
