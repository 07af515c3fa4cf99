"""Two-tier limiter: a global token bucket in front of per-identity buckets.

The global bucket caps total throughput; the per-identity buckets keep a
single caller from taking all of it. A request must pass both, and the
global bucket is always asked first:

- If the global bucket denies, the request is denied and no per-identity
  state is looked up or created.
- If the global bucket admits but the identity bucket denies, the global
  token stays spent. There is no refund between the tiers.

Per-identity buckets are created on first use and kept for the lifetime of
the limiter; there is no eviction.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from admission.adapters.rate_limit.base import AbstractKeyedRateLimiter, require_positive_int
from admission.adapters.rate_limit.token_bucket import TokenBucketLimiter
from admission.utils.keys import hash_limiter_key

logger = logging.getLogger(__name__)


class GlobalRateLimiter(AbstractKeyedRateLimiter):
    """Composite limiter with one shared bucket and one bucket per identity."""

    def __init__(
        self,
        global_capacity: int,
        global_refill_rate: int,
        identity_capacity: int,
        identity_refill_rate: int,
        *,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        """Initialize the composite limiter.

        Args:
            global_capacity: Capacity of the bucket shared by all identities.
            global_refill_rate: Tokens per second added to the shared bucket.
            identity_capacity: Capacity of each per-identity bucket.
            identity_refill_rate: Tokens per second added to each identity bucket.
            clock: Monotonic nanosecond clock handed to every bucket.

        Raises:
            LimiterConfigError: If any capacity or rate is invalid.
        """
        require_positive_int("global_capacity", global_capacity)
        require_positive_int("global_refill_rate", global_refill_rate)
        self._identity_capacity = require_positive_int("identity_capacity", identity_capacity)
        self._identity_refill_rate = require_positive_int(
            "identity_refill_rate", identity_refill_rate
        )
        self._clock = clock
        self._global_limiter = TokenBucketLimiter(
            global_capacity, global_refill_rate, clock=clock
        )
        self._identity_limiters: dict[str, TokenBucketLimiter] = {}
        self._create_lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"GlobalRateLimiter(global={self._global_limiter!r}, "
            f"identity_capacity={self._identity_capacity}, "
            f"identity_refill_rate={self._identity_refill_rate}, "
            f"identities={len(self._identity_limiters)})"
        )

    def __len__(self) -> int:
        return len(self._identity_limiters)

    def __contains__(self, identity: object) -> bool:
        return identity in self._identity_limiters

    @property
    def global_limiter(self) -> TokenBucketLimiter:
        return self._global_limiter

    @property
    def identity_capacity(self) -> int:
        return self._identity_capacity

    @property
    def identity_refill_rate(self) -> int:
        return self._identity_refill_rate

    @property
    def identity_count(self) -> int:
        """Number of identities that have a bucket."""
        return len(self._identity_limiters)

    def limiter_for(self, identity: str) -> TokenBucketLimiter | None:
        """Return the bucket already created for ``identity``, if any."""
        return self._identity_limiters.get(identity)

    def allow_request(self, identity: str) -> bool:
        """Admit a request for ``identity`` if both tiers allow it.

        Args:
            identity: Caller key used to select the per-identity bucket.

        Returns:
            True when both the global and the identity bucket admitted it.

        Raises:
            TypeError: If identity is not a string.
        """
        if not isinstance(identity, str):
            raise TypeError(f"identity must be a str, got {type(identity).__name__}")

        if not self._global_limiter.allow_request():
            logger.debug("rate_limit.global_denied", extra={"key_hash": hash_limiter_key(identity)})
            return False

        allowed = self._get_or_create(identity).allow_request()
        if not allowed:
            logger.debug(
                "rate_limit.identity_denied", extra={"key_hash": hash_limiter_key(identity)}
            )
        return allowed

    def _get_or_create(self, identity: str) -> TokenBucketLimiter:
        limiter = self._identity_limiters.get(identity)
        if limiter is not None:
            return limiter

        # Re-checked under the lock: racing first requests must share one bucket.
        with self._create_lock:
            limiter = self._identity_limiters.get(identity)
            if limiter is None:
                limiter = TokenBucketLimiter(
                    self._identity_capacity, self._identity_refill_rate, clock=self._clock
                )
                self._identity_limiters[identity] = limiter
                logger.debug(
                    "rate_limit.identity_created",
                    extra={
                        "key_hash": hash_limiter_key(identity),
                        "identities": len(self._identity_limiters),
                    },
                )
            return limiter
