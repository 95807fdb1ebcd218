"""Durable storage for recordings and signed retrieval URLs.

``AudioStore`` owns key generation, content-type detection and TTL
policy; the provider-specific work sits behind ``ObjectBackend``.
``S3Backend`` talks to any S3-compatible service through boto3, running
the blocking client calls in the threadpool.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from feedbacker.audio.config import StorageConfig
from feedbacker.result import Err, Ok, Result

logger = logging.getLogger(__name__)

CONTENT_TYPES: dict[str, str] = {
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".webm": "audio/webm",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
}
DEFAULT_CONTENT_TYPE = "audio/mpeg"

_UNSAFE_NAME = re.compile(r"[^\w.\-]+")


class StorageError(RuntimeError):
    """Raised when an object cannot be written or read."""


class ObjectExistsError(StorageError):
    """Raised when a write would replace an existing object."""


class SigningError(StorageError):
    """Raised when the provider refuses to sign a URL."""


@dataclass(frozen=True)
class StoredRef:
    """Reference to a stored recording."""

    path: str
    content_type: str
    size: int


def content_type_for(filename: str) -> str:
    """Derive the content type from a file extension."""
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)


def safe_filename(filename: str | None) -> str:
    name = Path(filename or "").name or "audio"
    name = _UNSAFE_NAME.sub("_", name).strip("._") or "audio"
    return name[-80:]


class ObjectBackend(ABC):
    """Provider capability: store bytes and sign retrieval URLs."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider identifier for logs."""

    @abstractmethod
    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        """Write a new object; raise ObjectExistsError if the key is taken."""

    @abstractmethod
    async def presign(self, key: str, ttl_seconds: int) -> str:
        """Return a time-bounded GET URL; raise SigningError on refusal."""


class S3Backend(ObjectBackend):
    """S3-compatible object storage via boto3."""

    def __init__(self, config: StorageConfig, client: Any | None = None) -> None:
        if not config.bucket:
            raise StorageError("Storage bucket is not configured")
        self._config = config
        self._bucket = config.bucket
        self._client = client or self._create_client(config)

    @staticmethod
    def _create_client(config: StorageConfig) -> Any:
        kwargs: dict[str, Any] = {
            "region_name": config.region,
            "config": BotoConfig(signature_version="s3v4"),
        }
        if config.endpoint_url:
            kwargs["endpoint_url"] = config.endpoint_url
        if config.access_key and config.secret_key:
            kwargs["aws_access_key_id"] = config.access_key
            kwargs["aws_secret_access_key"] = config.secret_key
        return boto3.client("s3", **kwargs)

    @property
    def name(self) -> str:
        return "s3"

    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                IfNoneMatch="*",
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in ("PreconditionFailed", "ConditionalRequestConflict"):
                raise ObjectExistsError(f"Object {key} already exists") from exc
            raise StorageError(f"Failed to upload {key}: {code or exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Failed to upload {key}: {exc}") from exc

    async def presign(self, key: str, ttl_seconds: int) -> str:
        if ttl_seconds > self._config.provider_max_ttl_seconds:
            raise SigningError(
                f"TTL {ttl_seconds}s exceeds provider maximum "
                f"{self._config.provider_max_ttl_seconds}s"
            )
        try:
            return await run_in_threadpool(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            raise SigningError(f"Failed to sign {key}: {exc}") from exc


class AudioStore:
    """Stores recordings under unique keys and mints retrieval URLs.

    Args:
        backend: Provider implementation.
        config: Key prefix and TTL policy.
        clock: Wall-clock source in seconds, used for time-prefixed keys.
    """

    def __init__(
        self,
        backend: ObjectBackend,
        config: StorageConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._config = config or StorageConfig()
        self._clock = clock

    @property
    def backend(self) -> ObjectBackend:
        return self._backend

    def make_key(self, suggested_name: str | None) -> str:
        millis = int(self._clock() * 1000)
        prefix = self._config.prefix.strip("/")
        name = f"{millis}-{safe_filename(suggested_name)}"
        return f"{prefix}/{name}" if prefix else name

    async def put(
        self,
        source: bytes | str | Path,
        suggested_name: str | None,
    ) -> Result[StoredRef]:
        """Copy a recording into durable storage.

        Args:
            source: Raw bytes or a path to a local file.
            suggested_name: Client-side filename, used for the key suffix
                and content type.
        """
        try:
            if isinstance(source, bytes):
                body = source
            else:
                body = await run_in_threadpool(Path(source).read_bytes)
        except OSError as e:
            return Err("storage_failure", f"Cannot read upload: {e}")
        if not body:
            return Err("storage_failure", "Upload is empty")

        key = self.make_key(suggested_name)
        content_type = content_type_for(suggested_name or key)
        try:
            await self._backend.put_object(key, body, content_type)
        except ObjectExistsError as e:
            logger.warning("Refusing to overwrite %s", key)
            return Err("storage_conflict", str(e))
        except StorageError as e:
            logger.error("Upload to %s failed: %s", self._backend.name, e)
            return Err("storage_failure", str(e))

        logger.info("Stored %s (%d bytes, %s)", key, len(body), content_type)
        return Ok(StoredRef(path=key, content_type=content_type, size=len(body)))

    def clamp_ttl(self, ttl_seconds: int | None) -> int:
        if ttl_seconds is None:
            ttl_seconds = self._config.default_ttl_seconds
        return max(
            self._config.min_ttl_seconds,
            min(int(ttl_seconds), self._config.max_ttl_seconds),
        )

    async def sign(self, path: str, ttl_seconds: int | None = None) -> Result[str]:
        """Mint a time-bounded retrieval URL.

        The TTL is clamped to the configured range. If the provider
        refuses it, one retry is made at the provider maximum.
        """
        if not path:
            return Err("signing_failure", "Empty storage path")
        ttl = self.clamp_ttl(ttl_seconds)
        try:
            return Ok(await self._backend.presign(path, ttl))
        except SigningError as first:
            shorter = min(ttl, self._config.provider_max_ttl_seconds)
            if shorter >= ttl:
                shorter = max(self._config.min_ttl_seconds, ttl // 2)
            logger.info(
                "Signing %s with ttl=%ds refused (%s), retrying with %ds",
                path, ttl, first, shorter,
            )
            try:
                return Ok(await self._backend.presign(path, shorter))
            except SigningError as second:
                logger.error("Signing %s failed: %s", path, second)
                return Err("signing_failure", str(second))

    async def redirect(self, path: str) -> Result[str]:
        """Mint a short-lived URL for a regenerate-on-click link."""
        return await self.sign(path, self._config.redirect_ttl_seconds)


def create_audio_store(config: StorageConfig | None = None) -> AudioStore | None:
    """Build the configured store, or None when no bucket is set."""
    config = config or StorageConfig()
    if not config.configured:
        return None
    return AudioStore(S3Backend(config), config)
