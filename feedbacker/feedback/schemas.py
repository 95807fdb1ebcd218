"""Schema definitions for shopper feedback records.

Maps 1:1 to the ``feedback`` database table. Each record is one voice
submission after transcription and annotation; the core fields are
written once and never updated.
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from feedbacker.sentiment.schemas import VALID_SENTIMENTS

MAX_TAGS = 3


@dataclass
class FeedbackRecord:
    """A persisted, fully processed submission.

    Attributes:
        shop_id: Originating store; required.
        audio_path: Storage key of the recording.
        transcript: Full speech-to-text output; never empty.
        sentiment: positive, neutral or negative.
        emotion_score: Positivity in [0, 1].
        tags: 1-3 tags, canonical vocabulary first.
        summary: Short extractive summary.
        device_id: Submitting kiosk or phone, if known.
        is_anonymous: Whether the shopper asked not to be contacted.
        id: Generated identifier (uuid4).
        timestamp: Creation time.
    """

    shop_id: str
    audio_path: str
    transcript: str
    sentiment: str
    emotion_score: float
    tags: list[str]
    summary: str = ""
    device_id: str | None = None
    is_anonymous: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def __post_init__(self) -> None:
        if not self.shop_id or not self.shop_id.strip():
            raise ValueError("shop_id is required")
        if not self.transcript or not self.transcript.strip():
            raise ValueError("transcript must not be empty")
        if self.sentiment not in VALID_SENTIMENTS:
            raise ValueError(
                f"Invalid sentiment {self.sentiment!r}. "
                f"Must be one of: {sorted(VALID_SENTIMENTS)}"
            )
        if not (0.0 <= self.emotion_score <= 1.0):
            raise ValueError(
                f"Invalid emotion_score {self.emotion_score}. Must be in [0, 1]."
            )
        if not (1 <= len(self.tags) <= MAX_TAGS):
            raise ValueError(
                f"Invalid tag count {len(self.tags)}. Must be between 1 and {MAX_TAGS}."
            )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class FeedbackFilter:
    """Listing filter for the admin view."""

    shop_id: str | None = None
    sentiment: str | None = None
    since: datetime | None = None
    limit: int = 20
    offset: int = 0

    def __post_init__(self) -> None:
        if self.sentiment is not None and self.sentiment not in VALID_SENTIMENTS:
            raise ValueError(
                f"Invalid sentiment {self.sentiment!r}. "
                f"Must be one of: {sorted(VALID_SENTIMENTS)}"
            )
        if self.limit < 1:
            raise ValueError("limit must be positive")
        if self.offset < 0:
            raise ValueError("offset must not be negative")


@dataclass
class FeedbackPage:
    """One page of a listing.

    ``next_offset`` is None once a page comes back short.
    """

    items: list[FeedbackRecord]
    next_offset: int | None = None


@dataclass
class ShopFeedItem:
    """Lightweight row for a shop's feed."""

    id: str
    timestamp: datetime
    sentiment: str
    emotion_score: float
