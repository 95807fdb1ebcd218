"""Feedback repository for inserts, lookups and paginated listings.

Records are insert-only: there is no update path for the annotated
fields. ``save`` reports failures as ``Err`` so the pipeline can refuse
to acknowledge a submission that was not persisted.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from feedbacker.feedback.schemas import (
    FeedbackFilter,
    FeedbackPage,
    FeedbackRecord,
    ShopFeedItem,
)
from feedbacker.result import Err, Ok, Result
from feedbacker.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS feedback (
    id             UUID PRIMARY KEY,
    shop_id        TEXT NOT NULL,
    device_id      TEXT,
    is_anonymous   BOOLEAN NOT NULL DEFAULT FALSE,
    audio_path     TEXT NOT NULL,
    transcript     TEXT NOT NULL,
    sentiment      TEXT NOT NULL,
    emotion_score  REAL NOT NULL,
    tags           TEXT[] NOT NULL DEFAULT '{}',
    summary        TEXT NOT NULL DEFAULT '',
    timestamp      TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS idx_feedback_shop_ts ON feedback (shop_id, timestamp DESC);
CREATE INDEX IF NOT EXISTS idx_feedback_sentiment ON feedback (sentiment);
"""


def is_valid_id(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class FeedbackRepository:
    """Repository for feedback persistence and querying."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the feedback table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Feedback table ensured")

    async def save(self, record: FeedbackRecord) -> Result[FeedbackRecord]:
        """Insert a new record.

        Returns:
            Ok with the stored record, or Err("save_failure") on any
            database error.
        """
        sql = """
            INSERT INTO feedback (
                id, shop_id, device_id, is_anonymous, audio_path,
                transcript, sentiment, emotion_score, tags, summary, timestamp
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            RETURNING *
        """
        try:
            row = await self._db.fetchrow(
                sql,
                record.id,
                record.shop_id,
                record.device_id,
                record.is_anonymous,
                record.audio_path,
                record.transcript,
                record.sentiment,
                record.emotion_score,
                record.tags,
                record.summary,
                record.timestamp,
            )
        except Exception as e:
            logger.error("Failed to save feedback %s: %s", record.id, e)
            return Err("save_failure", str(e))

        if row is None:
            return Err("save_failure", "Insert returned no row")
        return Ok(_row_to_record(row))

    async def get_by_id(self, feedback_id: str) -> FeedbackRecord | None:
        """Fetch one record, or None if it does not exist."""
        if not is_valid_id(feedback_id):
            return None
        row = await self._db.fetchrow(
            "SELECT * FROM feedback WHERE id = $1", feedback_id
        )
        return _row_to_record(row) if row else None

    async def list_feedback(self, filters: FeedbackFilter) -> FeedbackPage:
        """List records newest first with offset pagination."""
        where_clause, params, param_idx = _build_where(filters)
        sql = f"""
            SELECT * FROM feedback
            {where_clause}
            ORDER BY timestamp DESC, id
            LIMIT ${param_idx} OFFSET ${param_idx + 1}
        """
        rows = await self._db.fetch(sql, *params, filters.limit, filters.offset)
        items = [_row_to_record(row) for row in rows]
        next_offset = filters.offset + len(items) if len(items) == filters.limit else None
        return FeedbackPage(items=items, next_offset=next_offset)

    async def count(self, filters: FeedbackFilter) -> int:
        where_clause, params, _ = _build_where(filters)
        sql = f"SELECT COUNT(*) FROM feedback {where_clause}"
        return int(await self._db.fetchval(sql, *params) or 0)

    async def list_for_shop(
        self,
        shop_id: str,
        since: datetime,
        limit: int,
    ) -> list[ShopFeedItem]:
        """Lightweight feed of a shop's records newer than ``since``."""
        sql = """
            SELECT id, timestamp, sentiment, emotion_score
            FROM feedback
            WHERE shop_id = $1 AND timestamp >= $2
            ORDER BY timestamp DESC
            LIMIT $3
        """
        rows = await self._db.fetch(sql, shop_id, since, limit)
        return [
            ShopFeedItem(
                id=str(row["id"]),
                timestamp=row["timestamp"],
                sentiment=row["sentiment"],
                emotion_score=float(row["emotion_score"]),
            )
            for row in rows
        ]


def _build_where(filters: FeedbackFilter) -> tuple[str, list[Any], int]:
    conditions: list[str] = []
    params: list[Any] = []
    param_idx = 1

    if filters.shop_id:
        conditions.append(f"shop_id = ${param_idx}")
        params.append(filters.shop_id)
        param_idx += 1

    if filters.sentiment:
        conditions.append(f"sentiment = ${param_idx}")
        params.append(filters.sentiment)
        param_idx += 1

    if filters.since is not None:
        conditions.append(f"timestamp >= ${param_idx}")
        params.append(filters.since)
        param_idx += 1

    where_clause = ""
    if conditions:
        where_clause = "WHERE " + " AND ".join(conditions)
    return where_clause, params, param_idx


def _row_to_record(row: Any) -> FeedbackRecord:
    """Convert an asyncpg Record to a FeedbackRecord."""
    return FeedbackRecord(
        id=str(row["id"]),
        shop_id=row["shop_id"],
        device_id=row.get("device_id"),
        is_anonymous=bool(row.get("is_anonymous")),
        audio_path=row["audio_path"],
        transcript=row["transcript"],
        sentiment=row["sentiment"],
        emotion_score=round(float(row["emotion_score"]), 2),
        tags=list(row["tags"] or []),
        summary=row.get("summary") or "",
        timestamp=row["timestamp"],
    )
