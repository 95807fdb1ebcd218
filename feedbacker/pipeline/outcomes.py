"""Submission and outcome types for the ingestion pipeline."""

import enum
from dataclasses import dataclass
from pathlib import Path

from feedbacker.feedback.schemas import FeedbackRecord


class RejectReason(str, enum.Enum):
    """Why a submission was refused before it was persisted."""

    MISSING_SHOP_ID = "missing_shop_id"
    RATE_LIMITED = "rate_limited"
    INVALID_DURATION = "invalid_duration"
    STORAGE_FAILURE = "storage_failure"
    EMPTY_TRANSCRIPT = "empty_transcript"
    SAVE_FAILURE = "save_failure"


STATUS_CODES: dict[RejectReason, int] = {
    RejectReason.MISSING_SHOP_ID: 400,
    RejectReason.RATE_LIMITED: 429,
    RejectReason.INVALID_DURATION: 400,
    RejectReason.STORAGE_FAILURE: 502,
    RejectReason.EMPTY_TRANSCRIPT: 422,
    RejectReason.SAVE_FAILURE: 500,
}

MESSAGES: dict[RejectReason, str] = {
    RejectReason.MISSING_SHOP_ID: "shopId is required",
    RejectReason.STORAGE_FAILURE: "Could not store the recording, please try again",
    RejectReason.EMPTY_TRANSCRIPT: "Audio contains no recognizable speech",
    RejectReason.SAVE_FAILURE: "Could not save feedback, please try again",
}


@dataclass
class Submission:
    """One uploaded recording awaiting processing.

    The pipeline takes ownership of ``file_path`` and deletes it.
    """

    shop_id: str | None
    file_path: Path
    filename: str | None = None
    device_id: str | None = None
    client_ip: str | None = None
    is_anonymous: bool = False


@dataclass(frozen=True)
class Rejected:
    """Terminal refusal.

    Attributes:
        reason: Failure category.
        message: Actionable text for the submitter.
        rate_reason: Limiter code (rate_ip_window, ...) for rate limits.
        retry_after: Seconds to wait, for rate limits.
        detail: Internal detail for logs; never shown to the submitter.
    """

    reason: RejectReason
    message: str
    rate_reason: str | None = None
    retry_after: int = 0
    detail: str = ""

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.reason]

    @classmethod
    def of(cls, reason: RejectReason, detail: str = "") -> "Rejected":
        return cls(reason=reason, message=MESSAGES[reason], detail=detail)


@dataclass(frozen=True)
class Accepted:
    """Submission persisted; alerting may still be in flight."""

    record: FeedbackRecord


Outcome = Accepted | Rejected
