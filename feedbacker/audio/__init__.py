"""Audio handling: duration validation and durable storage.

Components:
- AudioConfig / StorageConfig: Pydantic settings for uploads and the bucket
- validate_duration / probe_duration: Duration checks over container metadata
- AudioStore: Unique-key uploads and TTL-bounded signed URLs
- S3Backend: boto3 implementation of the storage capability
"""

from feedbacker.audio.config import AudioConfig, StorageConfig
from feedbacker.audio.store import (
    AudioStore,
    ObjectBackend,
    ObjectExistsError,
    S3Backend,
    SigningError,
    StorageError,
    StoredRef,
    content_type_for,
    create_audio_store,
)
from feedbacker.audio.validation import probe_duration, validate_duration, validate_file

__all__ = [
    "AudioConfig",
    "AudioStore",
    "ObjectBackend",
    "ObjectExistsError",
    "S3Backend",
    "SigningError",
    "StorageConfig",
    "StorageError",
    "StoredRef",
    "content_type_for",
    "create_audio_store",
    "probe_duration",
    "validate_duration",
    "validate_file",
]
