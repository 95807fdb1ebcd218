"""
Request and response models for the feedback API.

Wire names are camelCase (``shopId``, ``emotionScore``); Python
attributes stay snake_case.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from feedbacker.feedback.schemas import FeedbackRecord, ShopFeedItem


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(_CamelModel):
    """Error response body."""

    error: str = Field(..., description="Human-readable error message")
    reason: str | None = Field(
        default=None,
        description="Machine-readable reason code",
    )
    retry_after: int | None = Field(
        default=None,
        alias="retryAfter",
        description="Seconds to wait before retrying (rate limits only)",
    )


class FeedbackItem(_CamelModel):
    """A stored feedback record."""

    id: str = Field(..., description="Feedback identifier (UUID)")
    shop_id: str = Field(..., alias="shopId")
    device_id: str | None = Field(default=None, alias="deviceId")
    is_anonymous: bool = Field(default=False, alias="isAnonymous")
    audio_path: str = Field(..., alias="audioPath", description="Storage key of the recording")
    transcript: str
    sentiment: str = Field(..., description="positive, neutral or negative")
    emotion_score: float = Field(..., alias="emotionScore", ge=0.0, le=1.0)
    tags: list[str]
    summary: str
    timestamp: dt.datetime

    @classmethod
    def from_record(cls, record: FeedbackRecord) -> "FeedbackItem":
        return cls(
            id=record.id,
            shop_id=record.shop_id,
            device_id=record.device_id,
            is_anonymous=record.is_anonymous,
            audio_path=record.audio_path,
            transcript=record.transcript,
            sentiment=record.sentiment,
            emotion_score=record.emotion_score,
            tags=record.tags,
            summary=record.summary,
            timestamp=record.timestamp,
        )


class SubmitResponse(_CamelModel):
    """Response to an accepted submission."""

    status: str = "ok"
    feedback_id: str = Field(..., alias="feedbackId")
    sentiment: str
    emotion_score: float = Field(..., alias="emotionScore")
    tags: list[str]
    summary: str


class FeedbackDetailResponse(_CamelModel):
    status: str = "ok"
    feedback: FeedbackItem


class SignedUrlResponse(_CamelModel):
    signed_url: str = Field(..., alias="signedUrl")
    expires_in: int = Field(..., alias="expiresIn", description="TTL in seconds")


class ShopFeedEntry(_CamelModel):
    """Lightweight feed row."""

    id: str
    timestamp: dt.datetime
    sentiment: str
    emotion_score: float = Field(..., alias="emotionScore")

    @classmethod
    def from_item(cls, item: ShopFeedItem) -> "ShopFeedEntry":
        return cls(
            id=item.id,
            timestamp=item.timestamp,
            sentiment=item.sentiment,
            emotion_score=item.emotion_score,
        )


class FeedbackListResponse(_CamelModel):
    """Admin listing page."""

    items: list[FeedbackItem]
    total: int
    next_offset: int | None = Field(default=None, alias="nextOffset")


class SettingsResponse(_CamelModel):
    alert_threshold: float = Field(..., alias="alertThreshold")


class SettingsUpdateRequest(_CamelModel):
    alert_threshold: float = Field(
        ...,
        alias="alertThreshold",
        ge=0.0,
        le=1.0,
        description="Score at or below which negative feedback is critical",
    )


class ComponentHealth(BaseModel):
    """Health status of an infrastructure component."""

    status: str = Field(..., description="Component status: healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict | None = Field(default=None, description="Additional details")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Overall status: healthy, degraded or unhealthy")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    providers: dict[str, bool] = Field(
        default_factory=dict,
        description="Which external providers are configured",
    )
    version: str = Field(default="0.1.0")
