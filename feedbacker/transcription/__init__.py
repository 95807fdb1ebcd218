"""Speech-to-text for submitted recordings.

Components:
- Transcriber: Capability interface (audio URL in, text out)
- AssemblyAITranscriber: httpx client with submit-then-poll workflow
- TranscriptionConfig: Pydantic settings for credentials and budgets
- redact_url / redact_any: Credential masking for log output
"""

from feedbacker.transcription.client import (
    AssemblyAITranscriber,
    Transcriber,
    Transcript,
    TranscriptionError,
)
from feedbacker.transcription.config import TranscriptionConfig
from feedbacker.transcription.redact import redact_any, redact_url

__all__ = [
    "AssemblyAITranscriber",
    "Transcriber",
    "Transcript",
    "TranscriptionConfig",
    "TranscriptionError",
    "redact_any",
    "redact_url",
]
