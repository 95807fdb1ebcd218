"""Tests for credential masking."""

from feedbacker.transcription import redact_any, redact_url
from feedbacker.transcription.redact import PLACEHOLDER


class TestRedactUrl:
    def test_masks_signature_and_credential(self):
        url = "https://b.test/a.webm?X-Amz-Credential=AKIA&X-Amz-Signature=abc&X-Amz-Expires=60"
        redacted = redact_url(url)
        assert "AKIA" not in redacted
        assert "abc" not in redacted
        assert "X-Amz-Expires=60" in redacted
        assert redacted.count(PLACEHOLDER) == 2

    def test_masks_token_param(self):
        assert redact_url("https://x/a.mp3?token=abc&v=1") == (
            "https://x/a.mp3?token=[REDACTED]&v=1"
        )

    def test_plain_url_unchanged(self):
        assert redact_url("https://x/a.mp3") == "https://x/a.mp3"

    def test_none(self):
        assert redact_url(None) == ""


class TestRedactAny:
    def test_nested_structures(self):
        data = {"audio_url": "https://x/a?key=s3cr3t", "words": [{"text": "hi"}], "n": 3}
        redacted = redact_any(data)
        assert redacted["audio_url"] == "https://x/a?key=[REDACTED]"
        assert redacted["words"] == [{"text": "hi"}]
        assert redacted["n"] == 3
