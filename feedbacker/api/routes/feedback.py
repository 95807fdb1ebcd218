"""Feedback endpoints: voice submission, record lookup, audio links and shop feed."""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse, RedirectResponse

from feedbacker.api.auth import verify_api_key
from feedbacker.api.dependencies import (
    get_audio_config,
    get_audio_store,
    get_feedback_config,
    get_feedback_repository,
    get_pipeline,
)
from feedbacker.api.models import (
    ErrorResponse,
    FeedbackDetailResponse,
    FeedbackItem,
    ShopFeedEntry,
    SignedUrlResponse,
    SubmitResponse,
)
from feedbacker.audio.config import AudioConfig
from feedbacker.audio.store import AudioStore
from feedbacker.feedback.config import FeedbackConfig
from feedbacker.feedback.repository import FeedbackRepository, is_valid_id
from feedbacker.feedback.schemas import FeedbackRecord
from feedbacker.pipeline.outcomes import Rejected, RejectReason, Submission
from feedbacker.pipeline.service import IngestionPipeline
from feedbacker.ratelimit.limiter import client_ip
from feedbacker.result import Err

logger = structlog.get_logger(__name__)
router = APIRouter()

_CHUNK_BYTES = 1024 * 1024
_TRUTHY = frozenset({"true", "1", "yes", "on"})
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def base_mime(content_type: str | None) -> str:
    """``audio/webm;codecs=opus`` → ``audio/webm``."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def rejection_response(outcome: Rejected) -> JSONResponse:
    """Map a pipeline refusal onto its HTTP response."""
    body: dict = {
        "error": outcome.message,
        "reason": outcome.rate_reason or outcome.reason.value,
    }
    headers: dict[str, str] = {}
    if outcome.reason is RejectReason.RATE_LIMITED:
        body["retryAfter"] = outcome.retry_after
        headers["Retry-After"] = str(outcome.retry_after)
    return JSONResponse(status_code=outcome.status_code, content=body, headers=headers)


def _error(status_code: int, message: str, reason: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "reason": reason})


async def _spool(upload: UploadFile, max_bytes: int) -> Path | None:
    """Stream an upload to a temp file; None if it exceeds ``max_bytes``."""
    suffix = Path(upload.filename or "").suffix[:10]
    fd, name = tempfile.mkstemp(prefix="feedback-", suffix=suffix)
    path = Path(name)
    written = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while chunk := await upload.read(_CHUNK_BYTES):
                written += len(chunk)
                if written > max_bytes:
                    break
                out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    if written > max_bytes:
        path.unlink(missing_ok=True)
        return None
    return path


@router.post(
    "/feedback",
    response_model=SubmitResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing field or invalid duration"},
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        413: {"model": ErrorResponse, "description": "Upload too large"},
        415: {"model": ErrorResponse, "description": "Unsupported audio type"},
        422: {"model": ErrorResponse, "description": "No recognizable speech"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
        502: {"model": ErrorResponse, "description": "Storage failure"},
        500: {"model": ErrorResponse, "description": "Save failure"},
    },
    summary="Submit voice feedback",
    description=(
        "Upload a recording as multipart field ``audio`` with ``shopId`` and "
        "optional ``deviceId`` / ``isAnonymous``. The recording is stored, "
        "transcribed and annotated; managers are notified asynchronously."
    ),
)
async def submit_feedback(
    request: Request,
    audio: UploadFile | None = File(default=None),
    shop_id: str | None = Form(default=None, alias="shopId"),
    shop_id_snake: str | None = Form(default=None, alias="shop_id"),
    device_id: str | None = Form(default=None, alias="deviceId"),
    device_id_snake: str | None = Form(default=None, alias="device_id"),
    is_anonymous: str | None = Form(default=None, alias="isAnonymous"),
    is_anonymous_snake: str | None = Form(default=None, alias="is_anonymous"),
    api_key: str = Depends(verify_api_key),
    pipeline: IngestionPipeline = Depends(get_pipeline),
    audio_config: AudioConfig = Depends(get_audio_config),
):
    shop = (shop_id or shop_id_snake or "").strip()
    device = (device_id or device_id_snake or "").strip() or None

    if not shop:
        return rejection_response(Rejected.of(RejectReason.MISSING_SHOP_ID))
    if audio is None:
        return _error(status.HTTP_400_BAD_REQUEST, "Audio file is required", "missing_audio")

    mime = base_mime(audio.content_type)
    if mime not in audio_config.allowed_mime_types:
        return _error(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            f"Unsupported audio type {mime or 'unknown'!r}",
            "unsupported_media_type",
        )

    path = await _spool(audio, audio_config.max_upload_bytes)
    if path is None:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Audio file exceeds {audio_config.max_upload_mb} MB",
            "too_large",
        )

    submission = Submission(
        shop_id=shop,
        file_path=path,
        filename=audio.filename,
        device_id=device,
        client_ip=client_ip(
            request.headers.get("x-forwarded-for"),
            request.client.host if request.client else None,
        ),
        is_anonymous=parse_bool(is_anonymous or is_anonymous_snake),
    )
    outcome = await pipeline.process(submission)
    if isinstance(outcome, Rejected):
        return rejection_response(outcome)

    record = outcome.record
    return SubmitResponse(
        feedback_id=record.id,
        sentiment=record.sentiment,
        emotion_score=record.emotion_score,
        tags=record.tags,
        summary=record.summary,
    )


async def _load(feedback_id: str, repo: FeedbackRepository) -> FeedbackRecord:
    if not is_valid_id(feedback_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid feedback id")
    record = await repo.get_by_id(feedback_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return record


def _require_store(store: AudioStore | None) -> AudioStore:
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Audio storage is not configured",
        )
    return store


@router.get(
    "/feedback/{feedback_id}/full",
    response_model=FeedbackDetailResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed id"},
        404: {"model": ErrorResponse, "description": "Feedback not found"},
    },
    summary="Full feedback record",
)
async def get_full_feedback(
    feedback_id: str,
    repo: FeedbackRepository = Depends(get_feedback_repository),
) -> FeedbackDetailResponse:
    record = await _load(feedback_id, repo)
    return FeedbackDetailResponse(feedback=FeedbackItem.from_record(record))


@router.get(
    "/feedback/{feedback_id}/audio-url",
    response_model=SignedUrlResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed id"},
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        404: {"model": ErrorResponse, "description": "Feedback not found"},
        502: {"model": ErrorResponse, "description": "Signing failure"},
    },
    summary="Signed audio URL",
    description="Mint a time-bounded audio URL. ``ttl`` is clamped to the configured range.",
)
async def get_audio_url(
    feedback_id: str,
    ttl: int | None = Query(default=None, description="Requested TTL in seconds, clamped"),
    api_key: str = Depends(verify_api_key),
    repo: FeedbackRepository = Depends(get_feedback_repository),
    store: AudioStore | None = Depends(get_audio_store),
) -> SignedUrlResponse:
    record = await _load(feedback_id, repo)
    store = _require_store(store)
    effective_ttl = store.clamp_ttl(ttl)
    signed = await store.sign(record.audio_path, effective_ttl)
    if isinstance(signed, Err):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not sign audio URL")
    return SignedUrlResponse(signed_url=signed.value, expires_in=effective_ttl)


@router.get(
    "/feedback/{feedback_id}/redirect-audio",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed id"},
        404: {"model": ErrorResponse, "description": "Feedback not found"},
        502: {"model": ErrorResponse, "description": "Signing failure"},
    },
    summary="Redirect to a fresh audio URL",
    description="Stable link for notifications: a short-lived URL is minted on every click.",
)
async def redirect_audio(
    feedback_id: str,
    repo: FeedbackRepository = Depends(get_feedback_repository),
    store: AudioStore | None = Depends(get_audio_store),
) -> RedirectResponse:
    record = await _load(feedback_id, repo)
    store = _require_store(store)
    signed = await store.redirect(record.audio_path)
    if isinstance(signed, Err):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not sign audio URL")
    return RedirectResponse(signed.value, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get(
    "/feedback/{shop_id}",
    response_model=list[ShopFeedEntry],
    responses={401: {"model": ErrorResponse, "description": "Invalid API key"}},
    summary="Shop feed",
    description="Newest-first lightweight feed of one shop's feedback since ``since``.",
)
async def get_shop_feed(
    shop_id: str,
    since: datetime | None = Query(default=None, description="ISO-8601 lower bound"),
    limit: int | None = Query(default=None, ge=1, description="Page size (capped)"),
    api_key: str = Depends(verify_api_key),
    repo: FeedbackRepository = Depends(get_feedback_repository),
    config: FeedbackConfig = Depends(get_feedback_config),
) -> list[ShopFeedEntry]:
    effective_limit = min(limit or config.feed_default_limit, config.feed_max_limit)
    items = await repo.list_for_shop(shop_id, since or _EPOCH, effective_limit)
    return [ShopFeedEntry.from_item(item) for item in items]
