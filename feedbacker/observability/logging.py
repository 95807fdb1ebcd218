"""
Structured logging configuration using structlog.

JSON lines in production, coloured console output elsewhere. Every
event dict passes through ``redact_event`` so signed audio URLs and
provider tokens never reach the log sink in clear text.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from feedbacker.config.settings import get_settings
from feedbacker.transcription.redact import redact_any

# Provider SDKs are chatty at INFO and may echo signed URLs
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "botocore", "boto3", "urllib3")

# Keys structlog itself consumes later in the chain
_PASSTHROUGH_KEYS = frozenset({"exc_info", "positional_args", "stack_info"})


def redact_event(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask secret query parameters in every logged value."""
    return {
        key: value if key in _PASSTHROUGH_KEYS else redact_any(value)
        for key, value in event_dict.items()
    }


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Usage:
        setup_logging()
        logger = structlog.get_logger(__name__)
        logger.info("feedback_saved", feedback_id="...", shop_id="shop-1")
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_event,
    ]

    if settings.is_production:
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
