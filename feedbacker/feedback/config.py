"""Feedback listing configuration.

All settings can be overridden via ``FEEDBACK_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedbackConfig(BaseSettings):
    """Page sizes for feedback listings."""

    model_config = SettingsConfigDict(
        env_prefix="FEEDBACK_",
        case_sensitive=False,
        extra="ignore",
    )

    feed_default_limit: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Default page size of a shop's feed",
    )
    feed_max_limit: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Largest page a shop's feed may request",
    )
    admin_default_limit: int = Field(default=20, ge=1, le=200)
    admin_max_limit: int = Field(default=200, ge=1, le=1000)
