"""Sentiment analysis of transcripts.

Components:
- SentimentAnalyzer: Ordered backend chain with heuristic fallback
- FallbackChain: Ordered list with promote-to-front on success
- HuggingFaceBackend: Inference API client for stars5 / 3class models
- heuristic_sentiment: Deterministic keyword scorer
- SentimentConfig: Pydantic settings for tokens, models and timeouts
- SentimentResult / LabelScore: Normalised result types
"""

from feedbacker.sentiment.backends import (
    BackendError,
    HuggingFaceBackend,
    SentimentBackend,
    build_backends,
)
from feedbacker.sentiment.chain import FallbackChain
from feedbacker.sentiment.config import SentimentConfig
from feedbacker.sentiment.heuristic import heuristic_sentiment
from feedbacker.sentiment.schemas import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    VALID_SENTIMENTS,
    LabelScore,
    SentimentResult,
)
from feedbacker.sentiment.service import SentimentAnalyzer

__all__ = [
    "BackendError",
    "FallbackChain",
    "HuggingFaceBackend",
    "LabelScore",
    "NEGATIVE",
    "NEUTRAL",
    "POSITIVE",
    "SentimentAnalyzer",
    "SentimentBackend",
    "SentimentConfig",
    "SentimentResult",
    "VALID_SENTIMENTS",
    "build_backends",
    "heuristic_sentiment",
]
