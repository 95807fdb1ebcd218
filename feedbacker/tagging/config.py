"""Tag, summary and escalation configuration.

All settings can be overridden via ``TAGGING_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaggingConfig(BaseSettings):
    """Configuration for tag extraction, summaries and red-flag escalation."""

    model_config = SettingsConfigDict(
        env_prefix="TAGGING_",
        case_sensitive=False,
        extra="ignore",
    )

    max_tags: int = Field(default=3, ge=1, le=5, description="Tags kept per record")
    default_tag: str = Field(
        default="общее",
        min_length=1,
        description="Substituted when nothing else is extracted",
    )
    min_canonical_tags: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Frequency fallback runs when fewer canonical tags match",
    )
    min_token_length: int = Field(default=5, ge=2, le=20)
    frequency_top_n: int = Field(default=5, ge=1, le=20)

    summary_max_chars: int = Field(default=200, ge=40, le=1000)

    escalation_score_cap: float = Field(
        default=0.35,
        ge=0.0,
        le=0.4,
        description="Score ceiling applied when a red flag fires",
    )
    fit_size_rule_enabled: bool = Field(
        default=True,
        description="Escalate neutral records tagged with both fit and size",
    )
    fit_size_score_cap: float = Field(default=0.4, ge=0.0, le=0.4)
