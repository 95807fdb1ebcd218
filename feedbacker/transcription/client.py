"""
Speech-to-text client for AssemblyAI.

Submits a job referencing a retrievable audio URL, then polls the job
until it completes, fails, or the overall wait budget runs out. Every
failure is returned as ``Err``; nothing raises past ``transcribe``.

Audio URLs are usually signed and carry credentials, so they are only
ever logged through ``redact_url``.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from feedbacker.result import Err, Ok, Result
from feedbacker.transcription.config import TranscriptionConfig
from feedbacker.transcription.redact import redact_url

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


class TranscriptionError(Exception):
    """Raised inside the client when a job cannot produce text."""


@dataclass
class Transcript:
    """Finished transcription.

    Attributes:
        text: Transcript verbatim as produced by the provider.
        raw: Provider payload of the final poll.
    """

    text: str
    raw: dict[str, Any] = field(default_factory=dict)
    job_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class Transcriber(ABC):
    """Capability: turn a retrievable audio URL into text."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier for logs."""

    @abstractmethod
    async def transcribe(
        self,
        audio_url: str,
        *,
        poll_interval_ms: int | None = None,
        max_wait_ms: int | None = None,
    ) -> Result[Transcript]:
        """Transcribe the audio behind ``audio_url``."""


class AssemblyAITranscriber(Transcriber):
    """AssemblyAI REST client.

    Args:
        config: Credentials, language and polling budgets.
        transport: Optional httpx transport (tests inject MockTransport).
        sleep: Awaitable delay used between polls.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        config: TranscriptionConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or TranscriptionConfig()
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    @property
    def name(self) -> str:
        return "assemblyai"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers={"authorization": self._config.api_key or ""},
            timeout=self._config.request_timeout_seconds,
            transport=self._transport,
        )

    async def transcribe(
        self,
        audio_url: str,
        *,
        poll_interval_ms: int | None = None,
        max_wait_ms: int | None = None,
    ) -> Result[Transcript]:
        interval = (
            poll_interval_ms if poll_interval_ms is not None
            else self._config.poll_interval_ms
        ) / 1000.0
        budget = (
            max_wait_ms if max_wait_ms is not None else self._config.max_wait_ms
        ) / 1000.0

        if not self._config.api_key:
            return Err("not_configured", "Transcription API key is not set")
        if not audio_url:
            return Err("invalid_input", "Audio URL is empty")

        logger.info("Submitting transcription job for %s", redact_url(audio_url))
        try:
            async with self._client() as client:
                job_id = await self._submit(client, audio_url)
                return Ok(await self._poll(client, job_id, interval, budget))
        except TranscriptionError as e:
            logger.warning("Transcription failed: %s", redact_url(e))
            return Err("transcription_failed", redact_url(e))
        except httpx.TimeoutException as e:
            logger.warning("Transcription request timed out: %s", type(e).__name__)
            return Err("timeout", "Transcription provider timed out")
        except httpx.HTTPError as e:
            logger.warning("Transcription transport error: %s", redact_url(e))
            return Err("transport", redact_url(e))

    async def _submit(self, client: httpx.AsyncClient, audio_url: str) -> str:
        payload = {
            "audio_url": audio_url,
            "language_code": self._config.language_code,
            "punctuate": True,
            "format_text": True,
        }
        resp = await client.post("/transcript", json=payload)
        data = _json(resp)
        if not resp.is_success:
            raise TranscriptionError(
                f"Job creation returned {resp.status_code}: {data.get('error', 'unknown')}"
            )
        job_id = data.get("id")
        if not job_id:
            raise TranscriptionError("Job creation response has no id")
        logger.info("Transcription job %s created", job_id)
        return str(job_id)

    async def _poll(
        self,
        client: httpx.AsyncClient,
        job_id: str,
        interval: float,
        budget: float,
    ) -> Transcript:
        """Poll until the job settles or the budget runs out.

        Sleeps and per-request timeouts are capped at the remaining
        budget, so the whole wait never exceeds it.
        """
        deadline = self._clock() + budget
        last_status = ""
        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise TranscriptionError(
                    f"Job {job_id} did not finish within {budget:g}s"
                )
            await self._sleep(min(interval, remaining))
            remaining = deadline - self._clock()
            if remaining <= 0:
                continue

            resp = await client.get(
                f"/transcript/{job_id}",
                timeout=min(self._config.request_timeout_seconds, remaining),
            )
            data = _json(resp)
            if not resp.is_success:
                raise TranscriptionError(
                    f"Polling job {job_id} returned {resp.status_code}"
                )

            status = data.get("status", "")
            if status != last_status:
                logger.debug("Transcription job %s status: %s", job_id, status)
                last_status = status

            if status == STATUS_COMPLETED:
                text = str(data.get("text") or "")
                logger.info("Transcription job %s completed (%d chars)", job_id, len(text))
                return Transcript(text=text, raw=data, job_id=job_id)
            if status == STATUS_ERROR:
                raise TranscriptionError(
                    f"Job {job_id} failed: {data.get('error', 'unknown')}"
                )


def _json(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
