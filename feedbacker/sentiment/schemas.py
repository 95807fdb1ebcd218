"""Schema definitions for sentiment results."""

from dataclasses import dataclass

POSITIVE = "positive"
NEUTRAL = "neutral"
NEGATIVE = "negative"

VALID_SENTIMENTS: frozenset[str] = frozenset({POSITIVE, NEUTRAL, NEGATIVE})

# Classification thresholds on the 0..1 positivity scale
POSITIVE_THRESHOLD = 0.6
NEGATIVE_THRESHOLD = 0.4


@dataclass(frozen=True)
class LabelScore:
    """One entry of a backend's label distribution."""

    label: str
    score: float


@dataclass(frozen=True)
class SentimentResult:
    """Normalised sentiment of a transcript.

    Attributes:
        sentiment: One of positive, neutral, negative.
        emotion_score: Positivity in [0, 1], rounded to 2 decimals.
        source: Name of the backend that produced the result.
    """

    sentiment: str
    emotion_score: float
    source: str = "heuristic"

    def __post_init__(self) -> None:
        if self.sentiment not in VALID_SENTIMENTS:
            raise ValueError(
                f"Invalid sentiment {self.sentiment!r}. "
                f"Must be one of: {sorted(VALID_SENTIMENTS)}"
            )
        if not (0.0 <= self.emotion_score <= 1.0):
            raise ValueError(
                f"Invalid emotion_score {self.emotion_score}. Must be in [0, 1]."
            )
