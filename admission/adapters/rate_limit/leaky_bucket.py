"""In-memory leaky bucket limiter.

Admitted requests are queued up to a fixed capacity and leak out one at a
time on a fixed period driven by a background thread owned by the limiter.
Unlike the token bucket, the output rate is capped regardless of how
requests arrive.

Notes:
- Per-process only.
- Thread-safe: caller threads and the drain thread share one lock.
- The drain thread is a daemon; call ``close()`` to stop it earlier.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable

from admission.adapters.rate_limit.base import AbstractRateLimiter, require_positive_int

logger = logging.getLogger(__name__)


class LeakyBucketLimiter(AbstractRateLimiter):
    """Rate limiter backed by a bounded FIFO queue drained at ``leak_rate``/s."""

    def __init__(
        self,
        capacity: int,
        leak_rate: int,
        *,
        clock: Callable[[], float] = time.monotonic,
        autostart: bool = True,
    ) -> None:
        """Initialize the leaky bucket and start draining.

        Args:
            capacity: Maximum number of queued (not yet leaked) requests.
            leak_rate: Number of queue entries drained per second.
            clock: Monotonic time source returning seconds.
            autostart: Start the drain thread immediately (default True).

        Raises:
            LimiterConfigError: If capacity or leak_rate are invalid.
        """
        self._capacity = require_positive_int("capacity", capacity)
        self._leak_rate = require_positive_int("leak_rate", leak_rate)
        self._interval = 1.0 / self._leak_rate
        self._clock = clock
        self._lock = threading.Lock()
        self._queue: deque[float] = deque()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        if autostart:
            self.start()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"LeakyBucketLimiter(capacity={self._capacity}, leak_rate={self._leak_rate}, "
            f"queued={len(self._queue)})"
        )

    def __enter__(self) -> LeakyBucketLimiter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def leak_rate(self) -> int:
        return self._leak_rate

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def queued(self) -> int:
        """Number of admitted requests still waiting to leak."""
        with self._lock:
            return len(self._queue)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def allow_request(self) -> bool:
        """Enqueue the request if the bucket has room.

        No draining happens here; only the background thread removes entries.

        Returns:
            True when the request was queued, False when the bucket is full.
        """
        now = self._clock()
        with self._lock:
            if len(self._queue) < self._capacity:
                self._queue.append(now)
                return True
            return False

    def leak(self) -> bool:
        """Remove the oldest queued entry, if any.

        Returns:
            True when an entry was removed.
        """
        with self._lock:
            if self._queue:
                self._queue.popleft()
                return True
            return False

    def start(self) -> None:
        """Start the drain thread. Calling it on a running limiter is a no-op."""
        if self._thread is not None:
            return

        self._thread = threading.Thread(
            target=self._drain_loop,
            daemon=True,
            name=f"leaky-bucket-drain-{id(self):x}",
        )
        self._thread.start()
        logger.debug(
            "leaky_bucket.started",
            extra={
                "capacity": self._capacity,
                "leak_rate": self._leak_rate,
                "interval_s": self._interval,
            },
        )

    def close(self) -> None:
        """Stop the drain thread and wait for it to exit. Idempotent."""
        self._stop_event.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return

        thread.join(timeout=5.0)
        if thread.is_alive():
            logger.warning("leaky_bucket.stop_timeout", extra={"thread": thread.name})
        else:
            logger.debug("leaky_bucket.stopped", extra={"thread": thread.name})

    def _drain_loop(self) -> None:
        # Ticks are pinned to absolute deadlines; a late thread catches up
        # like a fixed-rate timer.
        next_tick = self._clock() + self._interval
        while not self._stop_event.is_set():
            delay = next_tick - self._clock()
            if delay > 0:
                if self._stop_event.wait(delay):
                    break
                continue

            self.leak()
            next_tick += self._interval
