"""Schema for manager notifications.

An Alert is a rendered view of one persisted feedback record: severity
and title derived from the alert threshold, plus the links a manager
follows to the full record and the audio.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from feedbacker.feedback.schemas import FeedbackRecord
from feedbacker.sentiment.schemas import NEGATIVE, NEUTRAL, POSITIVE

AlertSeverity = Literal["critical", "warning", "info"]

SENTIMENT_ICONS: dict[str, str] = {
    POSITIVE: "🟢",
    NEUTRAL: "🟡",
    NEGATIVE: "🔴",
}

TITLES: dict[str, str] = {
    "critical": "Критичный отзыв",
    "warning": "Негативный отзыв",
    "info": "Новый отзыв",
}


def severity_for(record: FeedbackRecord, threshold: float) -> AlertSeverity:
    """Critical for negative records at or below the threshold."""
    if record.sentiment == NEGATIVE:
        return "critical" if record.emotion_score <= threshold else "warning"
    return "info"


def excerpt(text: str, max_chars: int = 400, max_lines: int = 4) -> str:
    """Cap a transcript to ``max_lines`` lines and ``max_chars`` characters."""
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    clipped = "\n".join(lines[:max_lines])
    if len(lines) <= max_lines and len(clipped) <= max_chars:
        return clipped
    return clipped[: max_chars - 1].rstrip() + "…"


@dataclass
class Alert:
    """A notification about one feedback record.

    Attributes:
        feedback_id: Record the alert refers to.
        shop_id: Originating store.
        device_id: Submitting device, if known.
        severity: critical, warning or info.
        title: Short human-readable headline.
        sentiment: Record sentiment.
        emotion_score: Record positivity score.
        tags: Record tags.
        summary: Record summary.
        transcript_excerpt: Length-capped transcript.
        full_url: Link to the full record view.
        audio_url: Link that redirects to a freshly signed audio URL.
        created_at: When the alert was built.
    """

    feedback_id: str
    shop_id: str
    severity: str
    title: str
    sentiment: str
    emotion_score: float
    tags: list[str]
    summary: str
    transcript_excerpt: str
    full_url: str
    audio_url: str
    device_id: str | None = None
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def icon(self) -> str:
        return SENTIMENT_ICONS.get(self.sentiment, "⚪")

    @classmethod
    def from_record(
        cls,
        record: FeedbackRecord,
        threshold: float,
        public_base_url: str,
        excerpt_chars: int = 400,
        excerpt_lines: int = 4,
    ) -> "Alert":
        severity = severity_for(record, threshold)
        base = public_base_url.rstrip("/")
        return cls(
            feedback_id=record.id,
            shop_id=record.shop_id,
            device_id=record.device_id,
            severity=severity,
            title=TITLES[severity],
            sentiment=record.sentiment,
            emotion_score=record.emotion_score,
            tags=list(record.tags),
            summary=record.summary,
            transcript_excerpt=excerpt(record.transcript, excerpt_chars, excerpt_lines),
            full_url=f"{base}/feedback/{record.id}/full",
            audio_url=f"{base}/feedback/{record.id}/redirect-audio",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "feedback_id": self.feedback_id,
            "shop_id": self.shop_id,
            "device_id": self.device_id,
            "severity": self.severity,
            "title": self.title,
            "sentiment": self.sentiment,
            "emotion_score": self.emotion_score,
            "tags": self.tags,
            "summary": self.summary,
            "transcript_excerpt": self.transcript_excerpt,
            "full_url": self.full_url,
            "audio_url": self.audio_url,
            "created_at": self.created_at.isoformat(),
        }
