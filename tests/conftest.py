"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults must be in place before anything imports settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
# This prevents the .env file from overriding test configuration
os.environ["TESTING"] = "true"

os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LIMITER_GLOBAL_CAPACITY", "25")
os.environ.setdefault("LIMITER_GLOBAL_REFILL_RATE", "15")
os.environ.setdefault("LIMITER_IDENTITY_CAPACITY", "3")
os.environ.setdefault("LIMITER_IDENTITY_REFILL_RATE", "1")

import pytest  # noqa: E402


class FakeClock:
    """Deterministic monotonic clock returning integer nanoseconds."""

    def __init__(self, start_ns: int = 1_000_000_000_000) -> None:
        self.now_ns = start_ns

    def __call__(self) -> int:
        return self.now_ns

    def advance(self, seconds: float) -> None:
        self.now_ns += int(seconds * 1_000_000_000)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
