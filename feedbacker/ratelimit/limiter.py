"""In-memory sliding-window rate limiter for feedback submissions.

Tracks three independent gates:

1. Minimum interval between two submissions from the same device.
2. Count of submissions per client IP over a trailing window.
3. Count of submissions per device over a trailing window.

Windows live in process memory and reset on restart. ``check`` performs
no awaits, so under a single event loop each call is an atomic critical
section for its keys.
"""

import logging
import math
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from feedbacker.ratelimit.config import RateLimitConfig

logger = logging.getLogger(__name__)

REASON_MIN_INTERVAL = "rate_min_interval"
REASON_IP_WINDOW = "rate_ip_window"
REASON_DEVICE_WINDOW = "rate_device_window"

UNKNOWN_DEVICE = "unknown"


@dataclass(frozen=True)
class RateDecision:
    """Outcome of a rate-limit check.

    Attributes:
        allowed: Whether the request may proceed.
        reason: Machine-readable rejection code, None when allowed.
        retry_after: Seconds until a retry could succeed (0 when allowed).
    """

    allowed: bool
    reason: str | None = None
    retry_after: int = 0

    @property
    def message(self) -> str:
        if self.allowed:
            return ""
        if self.reason == REASON_MIN_INTERVAL:
            return f"Too many requests from this device, retry in {self.retry_after} s"
        if self.reason == REASON_IP_WINDOW:
            return f"Too many requests from this address, retry in {self.retry_after} s"
        return f"Too many requests from this device, retry in {self.retry_after} s"


ALLOW = RateDecision(allowed=True)


class SlidingWindow:
    """Per-key timestamp log pruned lazily on access."""

    def __init__(self, window_seconds: float) -> None:
        self._window = window_seconds
        self._events: dict[str, deque[float]] = {}

    def prune(self, key: str, now: float) -> None:
        events = self._events.get(key)
        if events is None:
            return
        since = now - self._window
        while events and events[0] < since:
            events.popleft()
        if not events:
            del self._events[key]

    def add(self, key: str, now: float) -> int:
        """Record an event and return the count inside the window."""
        events = self._events.setdefault(key, deque())
        events.append(now)
        self.prune(key, now)
        return len(self._events.get(key, ()))

    def count(self, key: str, now: float) -> int:
        self.prune(key, now)
        return len(self._events.get(key, ()))

    def last(self, key: str) -> float | None:
        events = self._events.get(key)
        return events[-1] if events else None

    def retry_after(self, key: str, now: float) -> float:
        """Seconds until the oldest event leaves the window."""
        events = self._events.get(key)
        if not events:
            return 0.0
        return max(0.0, events[0] + self._window - now)

    def __len__(self) -> int:
        return len(self._events)


class RateLimiter:
    """Guards submissions by client IP and device identifier.

    Create one instance per process and pass it to the request handlers;
    tests construct fresh instances with an injected clock.

    Args:
        config: Window sizes and limits.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._clock = clock
        self._ip = SlidingWindow(self._config.ip_window_seconds)
        self._device = SlidingWindow(self._config.device_window_seconds)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    def check(self, ip: str | None, device_id: str | None) -> RateDecision:
        """Evaluate and record one submission.

        Fails open: an internal error is logged and the request allowed.
        """
        if not self._config.enabled:
            return ALLOW
        try:
            return self._check(ip or UNKNOWN_DEVICE, device_id or UNKNOWN_DEVICE)
        except Exception:
            logger.exception("Rate limiter failed, allowing request")
            return ALLOW

    def _check(self, ip: str, device: str) -> RateDecision:
        now = self._clock()
        self._ip.prune(ip, now)
        self._device.prune(device, now)

        # Interval gate uses history from before this request
        min_interval = self._config.min_interval_ms / 1000.0
        last = self._device.last(device)
        if last is not None and now - last < min_interval:
            wait = min_interval - (now - last)
            return RateDecision(
                allowed=False,
                reason=REASON_MIN_INTERVAL,
                retry_after=max(1, math.ceil(wait)),
            )

        ip_count = self._ip.add(ip, now)
        device_count = self._device.add(device, now)

        if ip_count > self._config.ip_max:
            return RateDecision(
                allowed=False,
                reason=REASON_IP_WINDOW,
                retry_after=max(1, math.ceil(self._ip.retry_after(ip, now))),
            )
        if device_count > self._config.device_max:
            return RateDecision(
                allowed=False,
                reason=REASON_DEVICE_WINDOW,
                retry_after=max(1, math.ceil(self._device.retry_after(device, now))),
            )
        return ALLOW

    def reset(self) -> None:
        self._ip = SlidingWindow(self._config.ip_window_seconds)
        self._device = SlidingWindow(self._config.device_window_seconds)


def client_ip(forwarded_for: str | None, peer: str | None) -> str:
    """Pick the originating client address behind a proxy.

    Uses the first ``X-Forwarded-For`` entry, then the socket peer.
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer or UNKNOWN_DEVICE
