"""Tests for the sliding-window submission rate limiter."""

import pytest

from feedbacker.ratelimit import (
    REASON_DEVICE_WINDOW,
    REASON_IP_WINDOW,
    REASON_MIN_INTERVAL,
    RateLimitConfig,
    RateLimiter,
    client_ip,
)
from feedbacker.ratelimit.limiter import SlidingWindow


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── Fixtures ────────────────────────────────────────────


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return RateLimitConfig(
        ip_window_seconds=60,
        ip_max=3,
        device_window_seconds=300,
        device_max=12,
        min_interval_ms=0,
    )


@pytest.fixture
def limiter(config, clock):
    return RateLimiter(config, clock=clock)


# ── SlidingWindow ───────────────────────────────────────


class TestSlidingWindow:
    """Tests for the per-key timestamp log."""

    def test_counts_events_inside_window(self):
        window = SlidingWindow(10)
        assert window.add("k", 0.0) == 1
        assert window.add("k", 5.0) == 2
        assert window.count("k", 9.0) == 2

    def test_prunes_expired_events(self):
        window = SlidingWindow(10)
        window.add("k", 0.0)
        window.add("k", 5.0)
        assert window.count("k", 12.0) == 1

    def test_empty_keys_are_dropped(self):
        window = SlidingWindow(10)
        window.add("k", 0.0)
        window.prune("k", 100.0)
        assert len(window) == 0
        assert window.last("k") is None

    def test_retry_after_tracks_oldest_event(self):
        window = SlidingWindow(60)
        window.add("k", 10.0)
        window.add("k", 20.0)
        assert window.retry_after("k", 30.0) == pytest.approx(40.0)


# ── RateLimiter ─────────────────────────────────────────


class TestIpWindow:
    """Per-IP counting."""

    def test_allows_up_to_limit(self, limiter):
        for i in range(3):
            assert limiter.check("1.2.3.4", f"dev-{i}").allowed

    def test_rejects_beyond_limit_with_retry_hint(self, limiter, clock):
        for i in range(3):
            limiter.check("1.2.3.4", f"dev-{i}")
            clock.advance(1)

        decision = limiter.check("1.2.3.4", "dev-x")

        assert not decision.allowed
        assert decision.reason == REASON_IP_WINDOW
        # Oldest event was 3 s ago in a 60 s window
        assert decision.retry_after == 57
        assert "address" in decision.message

    def test_other_ip_is_unaffected(self, limiter):
        for i in range(4):
            limiter.check("1.2.3.4", f"dev-{i}")
        assert limiter.check("5.6.7.8", "dev-y").allowed

    def test_window_slides(self, limiter, clock):
        for i in range(4):
            limiter.check("1.2.3.4", f"dev-{i}")
        clock.advance(61)
        assert limiter.check("1.2.3.4", "dev-z").allowed

    def test_rejected_attempts_are_recorded(self, limiter, clock):
        for i in range(5):
            limiter.check("1.2.3.4", f"dev-{i}")
        clock.advance(59)
        # All five attempts still inside the window
        assert not limiter.check("1.2.3.4", "dev-late").allowed


class TestDeviceWindow:
    """Per-device counting."""

    def test_rejects_beyond_device_limit(self, clock):
        limiter = RateLimiter(
            RateLimitConfig(ip_max=100, device_max=2, min_interval_ms=0),
            clock=clock,
        )
        assert limiter.check("1.1.1.1", "kiosk").allowed
        assert limiter.check("2.2.2.2", "kiosk").allowed

        decision = limiter.check("3.3.3.3", "kiosk")

        assert not decision.allowed
        assert decision.reason == REASON_DEVICE_WINDOW
        assert decision.retry_after >= 1


class TestMinInterval:
    """Minimum gap between submissions from one device."""

    def test_rejects_rapid_resubmission(self, clock):
        limiter = RateLimiter(RateLimitConfig(min_interval_ms=1500), clock=clock)
        assert limiter.check("1.1.1.1", "kiosk").allowed
        clock.advance(0.2)

        decision = limiter.check("1.1.1.1", "kiosk")

        assert not decision.allowed
        assert decision.reason == REASON_MIN_INTERVAL
        assert decision.retry_after == 2

    def test_retry_after_is_at_least_one_second(self, clock):
        limiter = RateLimiter(RateLimitConfig(min_interval_ms=1500), clock=clock)
        limiter.check("1.1.1.1", "kiosk")
        clock.advance(1.4)
        assert limiter.check("1.1.1.1", "kiosk").retry_after == 1

    def test_allows_after_interval(self, clock):
        limiter = RateLimiter(RateLimitConfig(min_interval_ms=1500), clock=clock)
        limiter.check("1.1.1.1", "kiosk")
        clock.advance(1.5)
        assert limiter.check("1.1.1.1", "kiosk").allowed

    def test_missing_device_shares_unknown_bucket(self, clock):
        limiter = RateLimiter(RateLimitConfig(min_interval_ms=1500), clock=clock)
        assert limiter.check("1.1.1.1", None).allowed
        assert limiter.check("2.2.2.2", None).reason == REASON_MIN_INTERVAL


class TestFailOpen:
    """Disabled or broken limiter lets traffic through."""

    def test_disabled(self, clock):
        limiter = RateLimiter(RateLimitConfig(enabled=False, ip_max=1), clock=clock)
        for _ in range(5):
            assert limiter.check("1.1.1.1", "kiosk").allowed

    def test_internal_error_allows(self):
        def broken_clock():
            raise RuntimeError("clock failure")

        limiter = RateLimiter(RateLimitConfig(), clock=broken_clock)
        decision = limiter.check("1.1.1.1", "kiosk")
        assert decision.allowed
        assert decision.message == ""

    def test_reset_clears_history(self, limiter):
        for i in range(4):
            limiter.check("1.2.3.4", f"dev-{i}")
        limiter.reset()
        assert limiter.check("1.2.3.4", "dev-9").allowed


class TestClientIp:
    def test_first_forwarded_entry(self):
        assert client_ip("203.0.113.5, 10.0.0.1", "10.0.0.2") == "203.0.113.5"

    def test_falls_back_to_peer(self):
        assert client_ip(None, "10.0.0.2") == "10.0.0.2"
        assert client_ip("  ", "10.0.0.2") == "10.0.0.2"

    def test_unknown_when_nothing_known(self):
        assert client_ip(None, None) == "unknown"
