"""Rate limiter interfaces.

Callers should depend on these abstractions (not the concrete algorithms)
so a limiter policy can be swapped without touching the admission point.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from admission.core.errors import LimiterConfigError


class AbstractRateLimiter(ABC):
    """Interface for limiters guarding a single stream of requests."""

    @abstractmethod
    def allow_request(self) -> bool:
        """Decide whether the current request may proceed.

        Returns:
            True when the request is admitted, False when it is denied.
        """
        raise NotImplementedError


class AbstractKeyedRateLimiter(ABC):
    """Interface for limiters that partition quota by a caller key."""

    @abstractmethod
    def allow_request(self, key: str) -> bool:
        """Decide whether the current request for ``key`` may proceed.

        Args:
            key: Identity of the caller (e.g., user id, API key, client IP).

        Returns:
            True when the request is admitted, False when it is denied.
        """
        raise NotImplementedError


def require_positive_int(field: str, value: object) -> int:
    """Validate a limiter construction parameter.

    Args:
        field: Parameter name, reported back in the error details.
        value: Value supplied by the caller.

    Returns:
        The value, unchanged, when it is an int >= 1.

    Raises:
        LimiterConfigError: If the value is not an int or is below 1.
    """

    # bool is an int subclass; True must not pass as a capacity of 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise LimiterConfigError(
            code="invalid_limiter_config",
            message=f"{field} must be an integer",
            details={"field": field, "actual_value": repr(value)},
        )
    if value < 1:
        raise LimiterConfigError(
            code="invalid_limiter_config",
            message=f"{field} must be >= 1",
            details={"field": field, "min_value": 1, "actual_value": value},
        )
    return value
