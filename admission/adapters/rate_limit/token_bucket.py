"""In-memory token bucket limiter.

Notes:
- Per-process only: nothing is shared between workers.
- Thread-safe: refill and consumption happen under one lock.
- Lazy refill: tokens are computed from elapsed time on each call, so an
  idle bucket costs nothing and no timer thread is needed per bucket.
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from admission.adapters.rate_limit.base import AbstractRateLimiter, require_positive_int

_NANOS_PER_SECOND = 1_000_000_000


class TokenBucketLimiter(AbstractRateLimiter):
    """Rate limiter holding up to ``capacity`` tokens refilled at a fixed rate.

    The bucket starts full, so a fresh limiter admits an initial burst of
    ``capacity`` requests. Each admitted request consumes one token.
    """

    def __init__(
        self,
        capacity: int,
        refill_rate: int,
        *,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        """Initialize the token bucket.

        Args:
            capacity: Maximum number of tokens held by the bucket.
            refill_rate: Tokens added per second of elapsed time.
            clock: Monotonic time source returning integer nanoseconds.

        Raises:
            LimiterConfigError: If capacity or refill_rate are invalid.
        """
        self._capacity = require_positive_int("capacity", capacity)
        self._refill_rate = require_positive_int("refill_rate", refill_rate)
        self._clock = clock
        self._lock = threading.Lock()
        self._available_tokens = self._capacity
        self._last_refill = clock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"TokenBucketLimiter(capacity={self._capacity}, "
            f"refill_rate={self._refill_rate}, available={self._available_tokens})"
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def refill_rate(self) -> int:
        return self._refill_rate

    @property
    def available_tokens(self) -> int:
        """Tokens currently held, as of the last refill (no refill is run)."""
        with self._lock:
            return self._available_tokens

    def allow_request(self) -> bool:
        """Consume one token if available.

        Returns:
            True when a token was consumed, False when the bucket is empty.
        """
        with self._lock:
            self._refill_locked()
            if self._available_tokens > 0:
                self._available_tokens -= 1
                return True
            return False

    def _refill_locked(self) -> None:
        now = self._clock()
        elapsed = max(0, now - self._last_refill)
        tokens_to_add = elapsed * self._refill_rate // _NANOS_PER_SECOND

        # Refill mark only moves once a whole token has accrued.
        if tokens_to_add > 0:
            self._available_tokens = min(self._available_tokens + tokens_to_add, self._capacity)
            self._last_refill = now
