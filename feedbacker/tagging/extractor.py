"""Tag, summary and red-flag extraction from transcripts.

Tags come from the canonical rule table first; if it yields fewer than
``min_canonical_tags`` matches, frequent content words fill in. The
result is deduplicated case-insensitively, capped at ``max_tags`` and
never empty.

The summary is one sentence: the first that trips a red flag, otherwise
the first one, with test utterances stripped and the length capped at a
word boundary.
"""

import re
from collections import Counter
from dataclasses import dataclass, field

from feedbacker.tagging.config import TaggingConfig
from feedbacker.tagging.rules import (
    BOILERPLATE_PATTERNS,
    RED_FLAG_RULES,
    STOP_WORDS,
    TAG_RULES,
    RedFlagRule,
    TagRule,
)

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?…])\s+")
_TOKEN = re.compile(r"[^\W\d_]+")
_WHITESPACE = re.compile(r"\s+")
_DANGLING = re.compile(r"^[\s,;:.!?…-]+|[\s,;:-]+$")
_EMPTY_PUNCT = re.compile(r"\s*,\s*(?=[,.!?…])")

ELLIPSIS = "…"


@dataclass
class Extraction:
    """Tags and summary for a transcript."""

    tags: list[str]
    summary: str


@dataclass
class RedFlagReport:
    """Red-flag scan of a transcript.

    Attributes:
        escalate: True when any rule matched.
        extra_tags: Tags contributed by matching rules, in rule order.
        matched: Names of the rules that matched.
    """

    escalate: bool = False
    extra_tags: list[str] = field(default_factory=list)
    matched: list[str] = field(default_factory=list)


def dedupe(items: list[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping first occurrences."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(item.strip())
    return out


def normalize_whitespace(text: str | None) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def truncate_words(text: str, limit: int) -> str:
    """Cut to ``limit`` characters at a word boundary, ending with an ellipsis."""
    if len(text) <= limit:
        return text
    cut = text[: limit - 1]
    space = cut.rfind(" ")
    if space > limit // 2:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") + ELLIPSIS


class TagExtractor:
    """Applies the rule tables to transcript text.

    Args:
        config: Limits and defaults.
        tag_rules: Canonical keyword families, in output order.
        red_flag_rules: High-severity phrase rules.
    """

    def __init__(
        self,
        config: TaggingConfig | None = None,
        tag_rules: tuple[TagRule, ...] = TAG_RULES,
        red_flag_rules: tuple[RedFlagRule, ...] = RED_FLAG_RULES,
    ) -> None:
        self._config = config or TaggingConfig()
        self._tag_rules = tag_rules
        self._red_flag_rules = red_flag_rules

    @property
    def config(self) -> TaggingConfig:
        return self._config

    def extract(self, text: str | None) -> Extraction:
        return Extraction(tags=self.tags(text), summary=self.summarize(text))

    def canonical_tags(self, text: str | None) -> list[str]:
        lowered = (text or "").lower()
        return dedupe([rule.tag for rule in self._tag_rules if rule.matches(lowered)])

    def frequency_tags(self, text: str | None) -> list[str]:
        """Most frequent content words, preferring those seen at least twice."""
        tokens = [
            token
            for token in _TOKEN.findall((text or "").lower())
            if len(token) >= self._config.min_token_length and token not in STOP_WORDS
        ]
        if not tokens:
            return []
        counts = Counter(tokens)
        repeated = [(word, n) for word, n in counts.items() if n >= 2]
        candidates = repeated or list(counts.items())
        # Counter preserves first-seen order, so sort is stable for ties
        candidates.sort(key=lambda item: item[1], reverse=True)
        return [word for word, _ in candidates[: self._config.frequency_top_n]]

    def tags(self, text: str | None) -> list[str]:
        tags = self.canonical_tags(text)
        if len(tags) < self._config.min_canonical_tags:
            tags = dedupe(tags + self.frequency_tags(text))
        tags = tags[: self._config.max_tags]
        return tags or [self._config.default_tag]

    def red_flags(self, text: str | None) -> RedFlagReport:
        lowered = (text or "").lower()
        report = RedFlagReport()
        for rule in self._red_flag_rules:
            if rule.matches(lowered):
                report.matched.append(rule.name)
                report.extra_tags.extend(rule.extra_tags)
        report.escalate = bool(report.matched)
        report.extra_tags = dedupe(report.extra_tags)
        return report

    def _is_flagged(self, sentence: str) -> bool:
        lowered = sentence.lower()
        return any(rule.matches(lowered) for rule in self._red_flag_rules)

    def summarize(self, text: str | None) -> str:
        clean = normalize_whitespace(text)
        if not clean:
            return ""

        sentences = [strip_boilerplate(s) for s in _SENTENCE_SPLIT.split(clean)]
        sentences = [s for s in sentences if s]
        if not sentences:
            stripped = strip_boilerplate(clean)
            return truncate_words(stripped, self._config.summary_max_chars) if stripped else ""

        chosen = next((s for s in sentences if self._is_flagged(s)), sentences[0])
        return truncate_words(chosen, self._config.summary_max_chars)

    def merge_tags(self, tags: list[str], extra_tags: list[str]) -> list[str]:
        """Combine extracted and red-flag tags within the tag limit.

        Red-flag tags always survive; remaining slots go to the extracted
        tags in their original order. The default tag is dropped once
        anything real is available.
        """
        limit = self._config.max_tags
        default = self._config.default_tag.lower()
        extras = dedupe(extra_tags)[:limit]
        base = [t for t in tags if t.lower() != default] if extras else list(tags)
        combined = dedupe(base + extras)
        if len(combined) <= limit:
            return combined or [self._config.default_tag]

        required = {t.lower() for t in extras}
        free_slots = limit - len(extras)
        kept: list[str] = []
        for tag in combined:
            if tag.lower() in required:
                kept.append(tag)
            elif free_slots > 0:
                kept.append(tag)
                free_slots -= 1
        return kept


def strip_boilerplate(sentence: str) -> str:
    """Remove test/placeholder utterances and tidy the leftovers."""
    out = sentence
    for pattern in BOILERPLATE_PATTERNS:
        out = pattern.sub("", out)
    out = _EMPTY_PUNCT.sub("", out)
    out = normalize_whitespace(out)
    out = _DANGLING.sub("", out)
    # A sentence reduced to punctuation carries nothing
    return out if _TOKEN.search(out) else ""
