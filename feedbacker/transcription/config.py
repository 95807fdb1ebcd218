"""Speech-to-text provider configuration.

All settings can be overridden via ``TRANSCRIPTION_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TranscriptionConfig(BaseSettings):
    """Configuration for the AssemblyAI transcription client."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIPTION_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="AssemblyAI API key")
    base_url: str = Field(default="https://api.assemblyai.com/v2")
    language_code: str = Field(default="ru", description="Spoken language of recordings")
    poll_interval_ms: int = Field(
        default=3000,
        ge=0,
        le=60_000,
        description="Delay between job status polls",
    )
    max_wait_ms: int = Field(
        default=180_000,
        ge=1000,
        le=900_000,
        description="Overall budget for a transcription job",
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120.0,
        description="Timeout for each submit/poll HTTP call",
    )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)
