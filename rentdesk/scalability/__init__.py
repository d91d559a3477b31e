"""Scalability layer: abuse throttling with pluggable window state. No FastAPI."""

from rentdesk.scalability.rate_limiter import (
    FixedWindowRateLimiter,
    InMemoryRateLimitBackend,
    RateLimitBackend,
    RateLimitDecision,
    RedisRateLimitBackend,
    WindowState,
)

__all__ = [
    "FixedWindowRateLimiter",
    "InMemoryRateLimitBackend",
    "RateLimitBackend",
    "RateLimitDecision",
    "RedisRateLimitBackend",
    "WindowState",
]
