"""Combine analyzer output with tag extraction and red-flag escalation.

Escalation wins over any remote model verdict: a transcript that trips
a red-flag rule is always stored as negative with a capped score.
"""

from dataclasses import dataclass

from feedbacker.sentiment.normalize import clamp01, reconcile, round2
from feedbacker.sentiment.schemas import NEGATIVE, NEUTRAL, SentimentResult
from feedbacker.tagging.config import TaggingConfig
from feedbacker.tagging.extractor import Extraction, RedFlagReport, TagExtractor
from feedbacker.tagging.rules import TAG_FIT, TAG_SIZE


@dataclass(frozen=True)
class Annotation:
    """Final annotation written to the feedback record."""

    sentiment: str
    emotion_score: float
    tags: list[str]
    summary: str
    escalated: bool = False


def merge(
    sentiment: SentimentResult,
    extraction: Extraction,
    flags: RedFlagReport,
    extractor: TagExtractor,
) -> Annotation:
    config: TaggingConfig = extractor.config
    label = sentiment.sentiment
    score = sentiment.emotion_score
    tags = extractor.merge_tags(extraction.tags, flags.extra_tags)

    if flags.escalate:
        label = NEGATIVE
        score = min(score, config.escalation_score_cap)
    elif (
        config.fit_size_rule_enabled
        and label == NEUTRAL
        and {TAG_FIT, TAG_SIZE} <= {t.lower() for t in tags}
    ):
        label = NEGATIVE
        score = min(score, config.fit_size_score_cap)

    score = round2(clamp01(score))
    return Annotation(
        sentiment=reconcile(label, score),
        emotion_score=score,
        tags=tags,
        summary=extraction.summary,
        escalated=flags.escalate,
    )
