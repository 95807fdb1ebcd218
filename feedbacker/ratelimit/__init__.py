"""Abuse protection for the submission endpoint.

Components:
- RateLimiter: Sliding-window limiter keyed by client IP and device
- RateDecision: Allow / reject outcome with reason code and retry hint
- RateLimitConfig: Pydantic settings for windows and maxima
"""

from feedbacker.ratelimit.config import RateLimitConfig
from feedbacker.ratelimit.limiter import (
    REASON_DEVICE_WINDOW,
    REASON_IP_WINDOW,
    REASON_MIN_INTERVAL,
    RateDecision,
    RateLimiter,
    client_ip,
)

__all__ = [
    "REASON_DEVICE_WINDOW",
    "REASON_IP_WINDOW",
    "REASON_MIN_INTERVAL",
    "RateDecision",
    "RateLimitConfig",
    "RateLimiter",
    "client_ip",
]
