"""Tests for structured logging setup and redaction."""

import logging

from feedbacker.observability.logging import QUIET_LOGGERS, redact_event, setup_logging


class TestRedactEvent:
    def test_masks_signed_url(self):
        event = redact_event(
            None,
            "info",
            {"event": "signed", "url": "https://b.test/a.webm?X-Amz-Signature=abc&X-Amz-Date=1"},
        )
        assert event["url"] == "https://b.test/a.webm?X-Amz-Signature=[REDACTED]&X-Amz-Date=1"

    def test_masks_nested_values(self):
        event = redact_event(None, "info", {"event": "e", "links": ["https://x/?token=t1"]})
        assert event["links"] == ["https://x/?token=[REDACTED]"]

    def test_leaves_exc_info_alone(self):
        exc_info = (ValueError, ValueError("x"), None)
        event = redact_event(None, "error", {"event": "e", "exc_info": exc_info})
        assert event["exc_info"] is exc_info

    def test_non_strings_untouched(self):
        event = redact_event(None, "info", {"event": "e", "score": 0.2, "ok": True})
        assert event["score"] == 0.2
        assert event["ok"] is True


class TestSetupLogging:
    def test_quietens_provider_loggers(self):
        setup_logging()
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
