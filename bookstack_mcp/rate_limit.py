"""Token bucket rate limiter for BookStack API requests.

The bucket starts full at ``burst_limit`` tokens and refills lazily at
``requests_per_minute / 60`` tokens per second whenever it is inspected.
Every outgoing request consumes one token.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable
from typing import Callable

from .exceptions import RateLimitTimeoutError
from .metrics_config import record_rate_limit_wait

logger = logging.getLogger(__name__)


class RateLimiter:
    """Asynchronous token bucket.

    Args:
        requests_per_minute: Sustained rate; must be positive.
        burst_limit: Bucket capacity; must be at least 1.
        clock: Monotonic time source in seconds.
        sleep: Coroutine used to wait; injectable for tests.
    """

    def __init__(
        self,
        requests_per_minute: float,
        burst_limit: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        if burst_limit < 1:
            raise ValueError("burst_limit must be at least 1")

        self.burst_limit = burst_limit
        self.refill_rate = requests_per_minute / 60.0
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst_limit)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.burst_limit), self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    async def acquire(self, timeout: float | None = None) -> float:
        """Take one token, waiting for the bucket to refill if it is empty.

        Waiters are served in arrival order. A caller sleeps at most once: after
        the computed wait the bucket is refilled and one token taken, with the
        count clamped at zero.

        Args:
            timeout: Maximum total seconds to wait, including time queued behind
                other callers; ``None`` waits indefinitely.

        Returns:
            Seconds spent waiting (0.0 when a token was available at once).

        Raises:
            RateLimitTimeoutError: If a token would not be available in time.
        """
        start = self._clock()
        deadline = None if timeout is None else start + timeout
        queued = self._lock.locked()

        if queued and timeout is not None:
            try:
                await asyncio.wait_for(self._lock.acquire(), timeout=max(0.0, timeout))
            except asyncio.TimeoutError:
                raise RateLimitTimeoutError(timeout) from None
        else:
            await self._lock.acquire()

        try:
            self._refill()
            slept = False
            if self._tokens < 1:
                wait_time = (1 - self._tokens) / self.refill_rate
                if deadline is not None and wait_time > deadline - self._clock():
                    raise RateLimitTimeoutError(timeout)
                logger.debug("Rate limit reached, waiting %.3fs for a token", wait_time)
                await self._sleep(wait_time)
                slept = True
                self._refill()

            self._tokens = max(0.0, self._tokens - 1)
            waited = max(0.0, self._clock() - start) if slept or queued else 0.0
            if waited:
                record_rate_limit_wait(waited)
            return waited
        finally:
            self._lock.release()

    def can_make_request(self) -> bool:
        """Report whether a request could proceed now, without consuming a token."""
        self._refill()
        return self._tokens >= 1

    def get_token_count(self) -> float:
        self._refill()
        return self._tokens
