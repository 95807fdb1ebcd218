"""Normalisation of backend outputs into the internal sentiment space.

Backends answer with label distributions in several shapes and label
vocabularies. Everything here is pure: parse the payload into
``list[LabelScore]`` at the boundary, map labels onto
positive/neutral/negative, and turn distributions into a 0..1
positivity score.
"""

import re
from typing import Any

from feedbacker.sentiment.schemas import (
    NEGATIVE,
    NEGATIVE_THRESHOLD,
    NEUTRAL,
    POSITIVE,
    POSITIVE_THRESHOLD,
    LabelScore,
)

_STARS = re.compile(r"([1-5])\s*(?:star|звезд|звёзд)", re.IGNORECASE)
_INDEXED = re.compile(r"^label[_\s-]?([0-2])$", re.IGNORECASE)
_NEGATIVE = re.compile(r"neg|негатив|отрицат", re.IGNORECASE)
_POSITIVE = re.compile(r"pos|позитив|положит", re.IGNORECASE)
_NEUTRAL = re.compile(r"neu|нейтрал", re.IGNORECASE)

# cardiffnlp checkpoints publish LABEL_0..2 as negative, neutral, positive
_INDEXED_LABELS = (NEGATIVE, NEUTRAL, POSITIVE)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def round2(value: float) -> float:
    return round(clamp01(value), 2)


def parse_output(payload: Any) -> list[LabelScore]:
    """Flatten a backend response into label/score pairs.

    Accepts ``[[{label, score}, ...]]`` and ``[{label, score}, ...]``.

    Raises:
        ValueError: If the payload has neither shape.
    """
    items = payload
    if isinstance(items, list) and items and isinstance(items[0], list):
        items = items[0]
    if not isinstance(items, list) or not items:
        raise ValueError(f"Unexpected sentiment output: {type(payload).__name__}")

    parsed: list[LabelScore] = []
    for item in items:
        if not isinstance(item, dict) or "label" not in item:
            raise ValueError("Sentiment output entry lacks a label")
        try:
            score = float(item.get("score") or 0.0)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Non-numeric score in sentiment output: {item!r}") from e
        parsed.append(LabelScore(label=str(item["label"]), score=score))
    return parsed


def star_value(label: str) -> int | None:
    match = _STARS.search(label)
    return int(match.group(1)) if match else None


def normalize_label(label: str) -> str | None:
    """Map a free-form label onto positive/neutral/negative.

    Star ratings map 1-2 to negative, 3 to neutral, 4-5 to positive.
    Returns None for labels that carry no polarity.
    """
    text = (label or "").strip()
    stars = star_value(text)
    if stars is not None:
        if stars <= 2:
            return NEGATIVE
        return NEUTRAL if stars == 3 else POSITIVE

    indexed = _INDEXED.match(text)
    if indexed:
        return _INDEXED_LABELS[int(indexed.group(1))]

    if _NEGATIVE.search(text):
        return NEGATIVE
    if _POSITIVE.search(text):
        return POSITIVE
    if _NEUTRAL.search(text):
        return NEUTRAL
    return None


def label_for_score(score: float) -> str:
    """Strict thresholds: above 0.6 positive, below 0.4 negative."""
    if score > POSITIVE_THRESHOLD:
        return POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def is_consistent(sentiment: str, score: float) -> bool:
    """Check a label against its score band (band edges are shared)."""
    if sentiment == NEGATIVE:
        return score <= NEGATIVE_THRESHOLD
    if sentiment == POSITIVE:
        return score >= POSITIVE_THRESHOLD
    return NEGATIVE_THRESHOLD <= score <= POSITIVE_THRESHOLD


def reconcile(sentiment: str, score: float) -> str:
    """Keep a label that fits its band, otherwise derive it from the score."""
    return sentiment if is_consistent(sentiment, score) else label_for_score(score)


def score_stars(distribution: list[LabelScore]) -> tuple[str, float]:
    """Weighted-average star rating rescaled from 1..5 to 0..1.

    Raises:
        ValueError: If no entry carries a star rating.
    """
    total = weight = 0.0
    for entry in distribution:
        stars = star_value(entry.label)
        if stars is None:
            continue
        total += stars * entry.score
        weight += entry.score
    if weight <= 0:
        raise ValueError("Star distribution has no usable entries")

    positivity = round2((total / weight - 1.0) / 4.0)
    return label_for_score(positivity), positivity


def score_three_class(distribution: list[LabelScore]) -> tuple[str, float]:
    """Argmax label plus positivity = mean(positive, 1 - negative).

    Raises:
        ValueError: If no entry maps to a polarity.
    """
    mass = {POSITIVE: 0.0, NEUTRAL: 0.0, NEGATIVE: 0.0}
    matched = False
    for entry in distribution:
        label = normalize_label(entry.label)
        if label is None:
            continue
        mass[label] += entry.score
        matched = True
    if not matched:
        raise ValueError("Three-class distribution has no recognised labels")

    # max() keeps the first of equal entries: positive wins ties, then negative
    sentiment = max((POSITIVE, NEGATIVE, NEUTRAL), key=lambda k: mass[k])
    positivity = round2((mass[POSITIVE] + (1.0 - mass[NEGATIVE])) / 2.0)
    return reconcile(sentiment, positivity), positivity
