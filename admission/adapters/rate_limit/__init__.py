"""Rate limiting adapters.

Three in-process policies behind a small abstraction layer:

- ``TokenBucketLimiter``: bursts up to capacity, lazy refill.
- ``LeakyBucketLimiter``: bounded queue drained at a fixed rate.
- ``GlobalRateLimiter``: shared token bucket plus one bucket per identity.
"""

from __future__ import annotations

from admission.adapters.rate_limit.base import AbstractKeyedRateLimiter, AbstractRateLimiter
from admission.adapters.rate_limit.global_limiter import GlobalRateLimiter
from admission.adapters.rate_limit.leaky_bucket import LeakyBucketLimiter
from admission.adapters.rate_limit.token_bucket import TokenBucketLimiter

__all__ = [
    "AbstractKeyedRateLimiter",
    "AbstractRateLimiter",
    "GlobalRateLimiter",
    "LeakyBucketLimiter",
    "TokenBucketLimiter",
]
