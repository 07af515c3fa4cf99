"""Rate limiting dependency for FastAPI routes.

This module wires the two-tier limiter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Swap-friendly: the dependency talks to ``AbstractKeyedRateLimiter``.
- One limiter per process: state must survive across requests.

Keying:
- Per API key when the ``X-API-Key`` header is present.
- Otherwise per client IP.
Every request also spends a token from the global bucket first.
"""

from __future__ import annotations

import logging
import math
from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from admission.adapters.rate_limit.base import AbstractKeyedRateLimiter
from admission.adapters.rate_limit.global_limiter import GlobalRateLimiter
from admission.core.config import LimiterSettings, settings
from admission.utils.keys import hash_limiter_key

logger = logging.getLogger(__name__)


_limiter: AbstractKeyedRateLimiter | None = None
_limiter_config: tuple[int, int, int, int] | None = None


def _config_tuple(limits: LimiterSettings) -> tuple[int, int, int, int]:
    return (
        limits.global_capacity,
        limits.global_refill_rate,
        limits.identity_capacity,
        limits.identity_refill_rate,
    )


def get_rate_limiter() -> AbstractKeyedRateLimiter:
    """Return the process-wide limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt
    from scratch; an existing limiter is never reconfigured in place.

    Returns:
        AbstractKeyedRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = _config_tuple(settings.limiter)
    if _limiter is None or _limiter_config != config:
        _limiter = GlobalRateLimiter(*config)
        _limiter_config = config
        logger.info(
            "rate_limit.configured",
            extra={
                "global_capacity": config[0],
                "global_refill_rate": config[1],
                "identity_capacity": config[2],
                "identity_refill_rate": config[3],
            },
        )

    return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next request starts with full buckets."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def _build_rate_limit_key(request: Request, x_api_key: str | None) -> str:
    """Build the namespaced limiter key for the current request."""

    if x_api_key:
        return f"api_key:{x_api_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def _retry_after_seconds(refill_rate: int) -> int:
    """Seconds until a caller's bucket earns its next token."""
    return max(1, math.ceil(1 / refill_rate))


async def enforce_rate_limit(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing admission control.

    When enabled, asks the limiter whether the caller may proceed. If either
    the global or the caller's bucket is empty, raises HTTP 429.

    Args:
        request: FastAPI request.
        x_api_key: API key from X-API-Key header.

    Raises:
        HTTPException: 429 Too Many Requests when the request is denied.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter()
    key = _build_rate_limit_key(request, x_api_key)
    key_hash = hash_limiter_key(key)
    key_type = "api_key" if x_api_key else "ip"

    if limiter.allow_request(key):
        logger.info(
            "rate_limit.allowed",
            extra={"key_type": key_type, "key_hash": key_hash},
        )
        return

    limits = settings.limiter
    retry_after = _retry_after_seconds(limits.identity_refill_rate)
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_type": key_type,
            "key_hash": key_hash,
            "identity_capacity": limits.identity_capacity,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(limits.identity_capacity)

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=headers or None,
    )
