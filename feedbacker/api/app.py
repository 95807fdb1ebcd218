"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from feedbacker.api.dependencies import cleanup_dependencies
from feedbacker.api.routes import admin, feedback, health
from feedbacker.config.settings import get_settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Feedback API starting up")
    yield
    logger.info("Feedback API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "feedback", "description": "Voice feedback submission and retrieval"},
        {"name": "admin", "description": "Feedback listing and alert settings"},
    ]

    app = FastAPI(
        title="Feedbacker API",
        description="""
Voice feedback ingestion for retail stores.

Shoppers record a short voice note; the service stores it, transcribes it,
scores sentiment, extracts tags and a summary, and notifies store managers.

## Authentication

Requires `X-API-KEY` header for submission and retrieval. Admin routes accept
keys from `ADMIN_API_KEYS` (falling back to `API_KEYS`). Notification links
(`/feedback/{id}/full`, `/feedback/{id}/redirect-audio`) need no header.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )

        # Bind to structlog contextvars for automatic log correlation
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()

    # Error bodies use {"error": ...} throughout
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=422,
            content={
                "error": f"{location}: {message}" if location else message,
                "reason": "invalid_request",
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(feedback.router, tags=["feedback"])
    app.include_router(admin.router, tags=["admin"])

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Feedbacker API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
