"""Admin endpoints: feedback listing and editable settings."""

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, Query

from feedbacker.api.auth import verify_admin_key
from feedbacker.api.dependencies import (
    get_feedback_config,
    get_feedback_repository,
    get_settings_service,
)
from feedbacker.api.models import (
    ErrorResponse,
    FeedbackItem,
    FeedbackListResponse,
    SettingsResponse,
    SettingsUpdateRequest,
)
from feedbacker.feedback.config import FeedbackConfig
from feedbacker.feedback.repository import FeedbackRepository
from feedbacker.feedback.schemas import FeedbackFilter
from feedbacker.sentiment.schemas import VALID_SENTIMENTS
from feedbacker.settings_store.service import SettingsService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin", dependencies=[Depends(verify_admin_key)])

_AUTH_ERRORS = {401: {"model": ErrorResponse, "description": "Invalid admin key"}}


@router.get(
    "/feedback",
    response_model=FeedbackListResponse,
    responses={
        **_AUTH_ERRORS,
        422: {"model": ErrorResponse, "description": "Invalid filter parameter"},
    },
    summary="List feedback",
    description="Newest-first listing with optional shop, sentiment and date filters.",
)
async def list_feedback(
    shop_id: str | None = Query(default=None, alias="shopId"),
    sentiment: str | None = Query(
        default=None,
        pattern="^(" + "|".join(sorted(VALID_SENTIMENTS)) + ")$",
        description="positive, neutral or negative",
    ),
    since: datetime | None = Query(default=None, description="ISO-8601 lower bound"),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    repo: FeedbackRepository = Depends(get_feedback_repository),
    config: FeedbackConfig = Depends(get_feedback_config),
) -> FeedbackListResponse:
    filters = FeedbackFilter(
        shop_id=shop_id or None,
        sentiment=sentiment,
        since=since,
        limit=min(limit or config.admin_default_limit, config.admin_max_limit),
        offset=offset,
    )
    page = await repo.list_feedback(filters)
    total = await repo.count(filters)
    return FeedbackListResponse(
        items=[FeedbackItem.from_record(r) for r in page.items],
        total=total,
        next_offset=page.next_offset,
    )


@router.get(
    "/settings",
    response_model=SettingsResponse,
    responses=_AUTH_ERRORS,
    summary="Current settings",
)
async def get_admin_settings(
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    return SettingsResponse(alert_threshold=await service.get_alert_threshold())


@router.put(
    "/settings",
    response_model=SettingsResponse,
    responses={
        **_AUTH_ERRORS,
        422: {"model": ErrorResponse, "description": "Threshold outside [0, 1]"},
    },
    summary="Update settings",
)
async def update_admin_settings(
    request: SettingsUpdateRequest,
    service: SettingsService = Depends(get_settings_service),
) -> SettingsResponse:
    await service.set_alert_threshold(request.alert_threshold)
    logger.info("Alert threshold updated", alert_threshold=request.alert_threshold)
    return SettingsResponse(alert_threshold=request.alert_threshold)
