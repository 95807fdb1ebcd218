"""Shared fixtures for sentiment tests."""

import asyncio

import httpx
import pytest

from feedbacker.sentiment import SentimentBackend, SentimentConfig, SentimentResult


class StaticBackend(SentimentBackend):
    """Backend answering with a fixed result, or raising, or hanging."""

    def __init__(self, name, result=None, error=None, delay=0.0):
        self._name = name
        self._result = result
        self._error = error
        self._delay = delay
        self.calls = 0

    @property
    def name(self):
        return self._name

    async def classify(self, text):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return self._result


@pytest.fixture
def static_backend():
    return StaticBackend


@pytest.fixture
def hf_config():
    return SentimentConfig(
        hf_tokens="tok-a,tok-b",
        base_url="https://hf.test/models",
        timeout_seconds=5,
    )


@pytest.fixture
def hf_transport():
    """MockTransport routing by model path; unknown models get 404."""

    def factory(responses: dict[str, httpx.Response], seen: list | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            for model, response in responses.items():
                if request.url.path.endswith(model):
                    return response
            return httpx.Response(404, json={"error": "Model not found"})

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def positive_result():
    return SentimentResult(sentiment="positive", emotion_score=0.9, source="static")
