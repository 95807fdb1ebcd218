"""Tags, summaries and red-flag escalation for transcripts.

Components:
- TagExtractor: Applies the rule tables to produce tags, summary, red flags
- TAG_RULES / RED_FLAG_RULES: Declarative keyword and phrase tables
- TaggingConfig: Pydantic settings for limits, defaults and escalation caps
"""

from feedbacker.tagging.config import TaggingConfig
from feedbacker.tagging.extractor import Extraction, RedFlagReport, TagExtractor
from feedbacker.tagging.rules import RED_FLAG_RULES, TAG_RULES, RedFlagRule, TagRule

__all__ = [
    "Extraction",
    "RED_FLAG_RULES",
    "RedFlagReport",
    "RedFlagRule",
    "TAG_RULES",
    "TagExtractor",
    "TagRule",
    "TaggingConfig",
]
