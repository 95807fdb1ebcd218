"""Remote sentiment backends.

Each backend turns text into a ``SentimentResult`` or raises
``BackendError``. The analyzer treats every error the same way: move on
to the next candidate.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from feedbacker.sentiment.config import SentimentConfig
from feedbacker.sentiment.normalize import parse_output, score_stars, score_three_class
from feedbacker.sentiment.schemas import SentimentResult

logger = logging.getLogger(__name__)

SCHEME_STARS5 = "stars5"
SCHEME_3CLASS = "3class"
VALID_SCHEMES: frozenset[str] = frozenset({SCHEME_STARS5, SCHEME_3CLASS})


class BackendError(Exception):
    """Raised when a backend cannot produce a usable result."""


class SentimentBackend(ABC):
    """A single inference candidate."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in logs and metrics."""

    @abstractmethod
    async def classify(self, text: str) -> SentimentResult:
        """Classify text.

        Raises:
            BackendError: On any transport, status, or payload problem.
        """


class HuggingFaceBackend(SentimentBackend):
    """HuggingFace Inference API model called with one access token.

    Args:
        model_id: Hub model identifier.
        scheme: ``stars5`` or ``3class`` output interpretation.
        token: Bearer token.
        config: Base URL and timeout.
        token_index: Position of the token, used only to tell backends apart.
        transport: Optional httpx transport (tests inject MockTransport).
    """

    def __init__(
        self,
        model_id: str,
        scheme: str,
        token: str,
        config: SentimentConfig | None = None,
        token_index: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if scheme not in VALID_SCHEMES:
            raise ValueError(
                f"Invalid scheme {scheme!r}. Must be one of: {sorted(VALID_SCHEMES)}"
            )
        self._model_id = model_id
        self._scheme = scheme
        self._token = token
        self._config = config or SentimentConfig()
        self._token_index = token_index
        self._transport = transport

    @property
    def name(self) -> str:
        return f"hf:{self._model_id}#{self._token_index}"

    @property
    def model_id(self) -> str:
        return self._model_id

    async def classify(self, text: str) -> SentimentResult:
        url = f"{self._config.base_url.rstrip('/')}/{self._model_id}"
        body = {
            "inputs": text,
            "options": {"wait_for_model": True, "use_cache": True},
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    url,
                    json=body,
                    headers={"Authorization": f"Bearer {self._token}"},
                )
        except httpx.TimeoutException as e:
            raise BackendError(f"{self.name} timed out") from e
        except httpx.HTTPError as e:
            raise BackendError(f"{self.name} transport error: {type(e).__name__}") from e

        if not resp.is_success:
            # 503 while the model loads and 429 on quota both fall through
            raise BackendError(f"{self.name} returned {resp.status_code}")

        try:
            distribution = parse_output(resp.json())
            if self._scheme == SCHEME_STARS5:
                sentiment, score = score_stars(distribution)
            else:
                sentiment, score = score_three_class(distribution)
        except ValueError as e:
            raise BackendError(f"{self.name} malformed output: {e}") from e

        return SentimentResult(sentiment=sentiment, emotion_score=score, source=self.name)


def parse_model_spec(spec: str) -> tuple[str, str]:
    """Split ``model_id:scheme``; the scheme defaults to stars5."""
    model_id, sep, scheme = spec.rpartition(":")
    if not sep or "/" in scheme:
        return spec.strip(), SCHEME_STARS5
    return model_id.strip(), scheme.strip().lower()


def build_backends(
    config: SentimentConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SentimentBackend]:
    """One backend per (model, token) pair, model-major order."""
    config = config or SentimentConfig()
    backends: list[SentimentBackend] = []
    for spec in config.models:
        model_id, scheme = parse_model_spec(spec)
        if scheme not in VALID_SCHEMES:
            logger.warning("Skipping model %s with unknown scheme %s", model_id, scheme)
            continue
        for index, token in enumerate(config.tokens):
            backends.append(
                HuggingFaceBackend(
                    model_id,
                    scheme,
                    token,
                    config=config,
                    token_index=index,
                    transport=transport,
                )
            )
    return backends
