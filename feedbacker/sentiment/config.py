"""Sentiment inference configuration.

All settings can be overridden via ``SENTIMENT_*`` environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SentimentConfig(BaseSettings):
    """Configuration for remote sentiment backends.

    ``models`` is an ordered list of ``model_id:scheme`` entries where
    scheme is ``stars5`` (1..5 star distribution) or ``3class``
    (positive/neutral/negative distribution). One backend is built per
    (model, token) pair, model-major.
    """

    model_config = SettingsConfigDict(
        env_prefix="SENTIMENT_",
        case_sensitive=False,
        extra="ignore",
    )

    hf_tokens: str | None = Field(
        default=None,
        description="Comma-separated HuggingFace Inference API tokens",
    )
    models: list[str] = Field(
        default=[
            "nlptown/bert-base-multilingual-uncased-sentiment:stars5",
            "cardiffnlp/twitter-xlm-roberta-base-sentiment:3class",
        ],
        description="Ordered model_id:scheme candidates",
    )
    base_url: str = Field(default="https://api-inference.huggingface.co/models")
    timeout_seconds: float = Field(
        default=8.0,
        ge=1.0,
        le=30.0,
        description="Per-backend budget before falling through to the next one",
    )

    @property
    def tokens(self) -> list[str]:
        return [t.strip() for t in (self.hf_tokens or "").split(",") if t.strip()]

    @property
    def configured(self) -> bool:
        return bool(self.tokens) and bool(self.models)
