"""
Health check endpoint: database connectivity plus provider configuration.
"""

import time

import structlog
from fastapi import APIRouter

from feedbacker.alerts.config import AlertConfig
from feedbacker.api.dependencies import get_database
from feedbacker.api.models import ComponentHealth, HealthResponse
from feedbacker.audio.config import StorageConfig
from feedbacker.sentiment.config import SentimentConfig
from feedbacker.storage.database import Database
from feedbacker.transcription.config import TranscriptionConfig

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


def configured_providers() -> dict[str, bool]:
    return {
        "storage": StorageConfig().configured,
        "transcription": TranscriptionConfig().configured,
        "sentiment": SentimentConfig().configured,
        "alerts": AlertConfig().configured,
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the database and report which external providers are configured.",
)
async def health_check() -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: storage or transcription is not configured (submissions fail)
    - healthy: everything needed to accept submissions is in place
    """
    try:
        db = await get_database()
    except Exception as e:
        logger.warning("Database unavailable", error=str(e))
        db_health = ComponentHealth(status="unhealthy", details={"error": str(e)})
    else:
        db_health = await _check_database(db)
    providers = configured_providers()

    if db_health.status == "unhealthy":
        status = "unhealthy"
    elif not (providers["storage"] and providers["transcription"]):
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        components={"database": db_health},
        providers=providers,
    )
