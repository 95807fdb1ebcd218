"""Deterministic lexical sentiment used when no remote backend answers.

Counts which entries of a fixed positive and negative keyword list occur
in the lowercased text (each keyword counts once) and moves the score
0.15 per net hit away from the neutral 0.5. Negative phrases are matched
first and blanked out before positives are counted, so the "нравится"
inside "не нравится" is not also scored as praise.
"""

from feedbacker.sentiment.normalize import label_for_score, round2
from feedbacker.sentiment.schemas import SentimentResult

POSITIVE_WORDS: tuple[str, ...] = (
    "отлично",
    "супер",
    "нравится",
    "класс",
    "хорошо",
    "удобно",
    "спасибо",
    "люблю",
    "рекомендую",
    "понравилось",
    "идеально",
    "быстро",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "плохо",
    "ужасно",
    "ненавижу",
    "не нравится",
    "дорого",
    "долго",
    "грубо",
    "проблема",
    "не работает",
    "ужас",
    "кошмар",
    "разочарование",
    "возврат",
    "брак",
    "грязно",
)

STEP = 0.15
SOURCE = "heuristic"


def heuristic_sentiment(text: str | None) -> SentimentResult:
    """Score text against the keyword lists. Never raises."""
    lowered = (text or "").lower()
    negative_hits = 0
    remainder = lowered
    for word in NEGATIVE_WORDS:
        if word in lowered:
            negative_hits += 1
            remainder = remainder.replace(word, " ")
    positive_hits = sum(1 for word in POSITIVE_WORDS if word in remainder)

    score = round2(0.5 + STEP * (positive_hits - negative_hits))
    return SentimentResult(
        sentiment=label_for_score(score),
        emotion_score=score,
        source=SOURCE,
    )
