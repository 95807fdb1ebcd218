"""Audio upload and object storage configuration.

``AudioConfig`` bounds what the submission endpoint accepts
(``AUDIO_*``); ``StorageConfig`` describes the S3-compatible bucket that
holds recordings and the signed-URL lifetimes (``STORAGE_*``).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AudioConfig(BaseSettings):
    """Constraints on uploaded recordings."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIO_",
        case_sensitive=False,
        extra="ignore",
    )

    min_seconds: float = Field(
        default=1.5,
        ge=0.0,
        le=60.0,
        description="Shortest accepted recording; filters empty taps",
    )
    max_seconds: float = Field(
        default=300.0,
        gt=0.0,
        le=3600.0,
        description="Longest accepted recording",
    )
    max_upload_mb: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum upload size in megabytes",
    )
    allowed_mime_types: list[str] = Field(
        default=[
            "audio/mpeg",
            "audio/mp3",
            "audio/wav",
            "audio/x-wav",
            "audio/webm",
            "audio/ogg",
            "audio/mp4",
            "audio/x-m4a",
        ],
        description="Content types accepted by the upload endpoint",
    )

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


class StorageConfig(BaseSettings):
    """S3-compatible object storage for recordings."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str | None = Field(default=None, description="Bucket holding recordings")
    region: str = Field(default="us-east-1")
    endpoint_url: str | None = Field(
        default=None,
        description="Custom endpoint for S3-compatible providers",
    )
    access_key: str | None = None
    secret_key: str | None = None
    prefix: str = Field(default="uploads", description="Key prefix for uploads")

    min_ttl_seconds: int = Field(default=60, ge=1)
    max_ttl_seconds: int = Field(
        default=14 * 24 * 3600,
        ge=60,
        description="Upper clamp applied to requested signed-URL lifetimes",
    )
    provider_max_ttl_seconds: int = Field(
        default=7 * 24 * 3600,
        ge=60,
        description="Longest lifetime the provider will sign (SigV4 caps at 7 days)",
    )
    default_ttl_seconds: int = Field(default=3600, ge=60)
    redirect_ttl_seconds: int = Field(
        default=300,
        ge=30,
        le=3600,
        description="Lifetime of URLs minted for redirect links",
    )

    @property
    def configured(self) -> bool:
        return bool(self.bucket)
