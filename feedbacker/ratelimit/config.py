"""Rate limiter configuration.

All settings can be overridden via ``RATE_LIMIT_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseSettings):
    """Sliding-window limits applied to feedback submissions."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Disable to accept every submission (local testing)",
    )
    ip_window_seconds: float = Field(
        default=60.0,
        gt=0,
        le=3600,
        description="Trailing window for per-IP counting",
    )
    ip_max: int = Field(
        default=10,
        ge=1,
        description="Max submissions per IP inside the window",
    )
    device_window_seconds: float = Field(
        default=300.0,
        gt=0,
        le=86400,
        description="Trailing window for per-device counting",
    )
    device_max: int = Field(
        default=12,
        ge=1,
        description="Max submissions per device inside the window",
    )
    min_interval_ms: int = Field(
        default=1500,
        ge=0,
        le=60_000,
        description="Minimum gap between two submissions from one device",
    )
