"""Retry policy for BookStack API requests."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Literal

if TYPE_CHECKING:
    from ..config import Settings


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to attempt a request and how long to wait in between.

    ``max_attempts=1`` disables retrying. Which failures are retried is
    decided by the error handler, not the policy.
    """

    max_attempts: int = 1
    backoff: Literal["exponential", "linear"] = "exponential"
    initial_delay: float = 1.0
    max_delay: float = 30.0
    jitter: float = 0.1

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            backoff=settings.retry_backoff,
            initial_delay=settings.retry_initial_delay,
            max_delay=settings.retry_max_delay,
        )

    def backoff_for(self, attempt: int) -> float:
        """Delay before the attempt following failed attempt number ``attempt`` (1-based).

        Args:
            attempt: Number of the attempt that just failed.

        Returns:
            Delay in seconds, capped at ``max_delay`` plus up to ``jitter`` of it.
        """
        if self.backoff == "linear":
            delay = self.initial_delay * attempt
        else:
            delay = self.initial_delay * (2 ** (attempt - 1))
        delay = min(delay, self.max_delay)
        if self.jitter:
            delay += random.uniform(0, delay * self.jitter)
        return delay
