"""Application-level exception types.

This module defines domain errors used across limiters and the HTTP layer,
enabling consistent error handling and logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional so each error only carries what is relevant.
    """

    code: str
    message: str
    hint: str
    field: str
    min_value: int
    actual_value: Any
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class LimiterConfigError(ValidationAppError, ValueError):
    """Raised when a limiter is constructed with invalid parameters.

    Also a ``ValueError`` so callers that only know the standard library
    contract can still catch it.
    """
