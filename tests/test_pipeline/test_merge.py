"""Tests for merging sentiment with tags and red-flag escalation."""

import pytest

from feedbacker.pipeline import merge
from feedbacker.sentiment import SentimentResult
from feedbacker.sentiment.normalize import is_consistent
from feedbacker.tagging import TagExtractor, TaggingConfig
from feedbacker.tagging.extractor import Extraction, RedFlagReport


@pytest.fixture
def extractor():
    return TagExtractor()


def _sentiment(label, score):
    return SentimentResult(sentiment=label, emotion_score=score, source="test")


class TestEscalation:
    def test_red_flag_overrides_positive_model(self, extractor):
        annotation = merge(
            _sentiment("positive", 0.9),
            Extraction(tags=["сервис"], summary="Продавец грубо ответил."),
            RedFlagReport(escalate=True, extra_tags=["сервис"], matched=["rude_staff"]),
            extractor,
        )

        assert annotation.sentiment == "negative"
        assert annotation.emotion_score == 0.35
        assert annotation.escalated
        assert annotation.tags == ["сервис"]

    def test_lower_score_is_kept(self, extractor):
        annotation = merge(
            _sentiment("negative", 0.1),
            Extraction(tags=["качество"], summary=""),
            RedFlagReport(escalate=True, extra_tags=["качество"], matched=["defect"]),
            extractor,
        )
        assert annotation.emotion_score == 0.1

    def test_flag_tags_merged_in(self, extractor):
        annotation = merge(
            _sentiment("neutral", 0.5),
            Extraction(tags=["размер", "качество", "цена"], summary=""),
            RedFlagReport(escalate=True, extra_tags=["возврат"], matched=["returns"]),
            extractor,
        )
        assert annotation.tags == ["размер", "качество", "возврат"]


class TestFitSizeRule:
    def test_neutral_fit_and_size_becomes_negative(self, extractor):
        annotation = merge(
            _sentiment("neutral", 0.55),
            Extraction(tags=["размер", "посадка"], summary=""),
            RedFlagReport(),
            extractor,
        )
        assert annotation.sentiment == "negative"
        assert annotation.emotion_score == 0.4
        assert not annotation.escalated

    def test_positive_left_alone(self, extractor):
        annotation = merge(
            _sentiment("positive", 0.8),
            Extraction(tags=["размер", "посадка"], summary=""),
            RedFlagReport(),
            extractor,
        )
        assert annotation.sentiment == "positive"

    def test_rule_can_be_disabled(self):
        extractor = TagExtractor(TaggingConfig(fit_size_rule_enabled=False))
        annotation = merge(
            _sentiment("neutral", 0.55),
            Extraction(tags=["размер", "посадка"], summary=""),
            RedFlagReport(),
            extractor,
        )
        assert annotation.sentiment == "neutral"


class TestConsistency:
    @pytest.mark.parametrize(
        "label,score,escalate",
        [
            ("positive", 0.61, False),
            ("neutral", 0.4, False),
            ("negative", 0.0, True),
            ("positive", 1.0, True),
            ("neutral", 0.6, False),
        ],
    )
    def test_label_always_matches_score(self, extractor, label, score, escalate):
        annotation = merge(
            _sentiment(label, score),
            Extraction(tags=["общее"], summary=""),
            RedFlagReport(escalate=escalate, matched=["x"] if escalate else []),
            extractor,
        )
        assert is_consistent(annotation.sentiment, annotation.emotion_score)
        assert 1 <= len(annotation.tags) <= 3
