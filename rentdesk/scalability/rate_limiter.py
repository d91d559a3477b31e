"""Fixed-window abuse throttling with an injected state backend."""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from rentdesk.security.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowState:
    count: int
    reset_at: float  # epoch seconds


@dataclass(frozen=True)
class RateLimitDecision:
    limited: bool
    remaining: int
    reset_at: float


class RateLimitBackend(Protocol):
    """Backend for window state. In-memory for one process, Redis for many."""

    async def hit(self, key: str, window_seconds: int) -> WindowState: ...


class InMemoryRateLimitBackend:
    """identifier -> (count, reset_at). Per process and approximate; swept of expired windows."""

    def __init__(
        self,
        sweep_interval_seconds: int = 600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._windows: dict[str, WindowState] = {}
        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._next_sweep = clock() + sweep_interval_seconds

    async def hit(self, key: str, window_seconds: int) -> WindowState:
        now = self._clock()
        if now >= self._next_sweep:
            self.sweep(now)
        state = self._windows.get(key)
        if state is None or now >= state.reset_at:
            state = WindowState(count=1, reset_at=now + window_seconds)
        else:
            state = WindowState(count=state.count + 1, reset_at=state.reset_at)
        self._windows[key] = state
        return state

    def sweep(self, now: float | None = None) -> int:
        """Drop expired windows. Returns how many were removed."""
        now = self._clock() if now is None else now
        expired = [key for key, state in self._windows.items() if now >= state.reset_at]
        for key in expired:
            del self._windows[key]
        self._next_sweep = now + self._sweep_interval
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RedisRateLimitBackend:
    """INCR + EXPIRE on a shared Redis; the key's TTL is the window."""

    def __init__(self, redis_client, clock: Callable[[], float] = time.time) -> None:
        self._redis = redis_client
        self._clock = clock

    async def hit(self, key: str, window_seconds: int) -> WindowState:
        count = await self._redis.incr(key)
        if count == 1:
            await self._redis.expire(key, window_seconds)
            ttl = window_seconds
        else:
            ttl = await self._redis.ttl(key)
            if ttl is None or ttl < 0:
                await self._redis.expire(key, window_seconds)
                ttl = window_seconds
        return WindowState(count=count, reset_at=self._clock() + ttl)


class FixedWindowRateLimiter:
    """At most `limit` hits per identifier per window."""

    def __init__(
        self,
        backend: RateLimitBackend,
        limit: int = 5,
        window_seconds: int = 60,
        key_prefix: str = "rate:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._limit = limit
        self._window = window_seconds
        self._key_prefix = key_prefix
        self._clock = clock

    def _key(self, identifier: str) -> str:
        return f"{self._key_prefix}{identifier}"

    async def check(self, identifier: str) -> RateLimitDecision:
        state = await self._backend.hit(self._key(identifier), self._window)
        limited = state.count > self._limit
        return RateLimitDecision(
            limited=limited,
            remaining=max(self._limit - state.count, 0),
            reset_at=state.reset_at,
        )

    async def enforce(self, identifier: str) -> RateLimitDecision:
        """Raises RateLimitExceededError once the identifier is over its budget."""
        decision = await self.check(identifier)
        if decision.limited:
            retry_after = max(math.ceil(decision.reset_at - self._clock()), 1)
            logger.warning(
                "rate_limit_exceeded",
                extra={"identifier": identifier, "retry_after": retry_after},
            )
            raise RateLimitExceededError("Too many requests", retry_after=retry_after)
        return decision
