"""Unit tests for the token bucket limiter."""

import random
import threading

import pytest

from admission.adapters.rate_limit.token_bucket import TokenBucketLimiter
from admission.core.errors import LimiterConfigError


def _drain(limiter: TokenBucketLimiter) -> int:
    allowed = 0
    while limiter.allow_request():
        allowed += 1
    return allowed


def test_starts_full(fake_clock) -> None:
    limiter = TokenBucketLimiter(10, 5, clock=fake_clock)

    assert limiter.available_tokens == 10
    assert limiter.capacity == 10
    assert limiter.refill_rate == 5


@pytest.mark.parametrize("capacity", [1, 3, 10])
def test_allows_exactly_capacity_then_denies(fake_clock, capacity: int) -> None:
    limiter = TokenBucketLimiter(capacity, 5, clock=fake_clock)

    results = [limiter.allow_request() for _ in range(capacity + 1)]

    assert results == [True] * capacity + [False]
    assert limiter.available_tokens == 0


def test_denied_request_does_not_mutate(fake_clock) -> None:
    limiter = TokenBucketLimiter(1, 1, clock=fake_clock)
    assert limiter.allow_request() is True

    assert limiter.allow_request() is False
    assert limiter.allow_request() is False
    assert limiter.available_tokens == 0


def test_refills_proportionally_to_elapsed_time(fake_clock) -> None:
    limiter = TokenBucketLimiter(10, 5, clock=fake_clock)
    _drain(limiter)

    fake_clock.advance(1)

    assert _drain(limiter) == 5


def test_refill_is_capped_at_capacity(fake_clock) -> None:
    limiter = TokenBucketLimiter(4, 5, clock=fake_clock)
    _drain(limiter)

    fake_clock.advance(100)

    assert _drain(limiter) == 4


def test_fractional_progress_is_kept_between_calls(fake_clock) -> None:
    limiter = TokenBucketLimiter(2, 1, clock=fake_clock)
    _drain(limiter)

    fake_clock.advance(0.6)
    assert limiter.allow_request() is False

    # 1.2s since the last whole-token refill, not 0.6s since the last call
    fake_clock.advance(0.6)
    assert limiter.allow_request() is True
    assert limiter.allow_request() is False


def test_partial_refill_keeps_previous_tokens(fake_clock) -> None:
    limiter = TokenBucketLimiter(10, 2, clock=fake_clock)
    for _ in range(7):
        assert limiter.allow_request() is True

    fake_clock.advance(1.5)

    # 3 left + floor(1.5 * 2) = 6
    assert _drain(limiter) == 6


def test_clock_going_backwards_adds_no_tokens(fake_clock) -> None:
    limiter = TokenBucketLimiter(5, 2, clock=fake_clock)
    _drain(limiter)

    fake_clock.advance(-5)
    assert limiter.allow_request() is False
    assert limiter.available_tokens == 0

    # Refill mark was not moved by the regression: 6s forward is 1s net
    fake_clock.advance(6)
    assert _drain(limiter) == 2


def test_tokens_stay_within_bounds(fake_clock) -> None:
    rng = random.Random(7)
    limiter = TokenBucketLimiter(8, 3, clock=fake_clock)

    for _ in range(500):
        fake_clock.advance(rng.choice([0, 0, 0.05, 0.3, 1, 5, -0.5]))
        limiter.allow_request()
        assert 0 <= limiter.available_tokens <= limiter.capacity


def test_concurrent_callers_never_over_grant(fake_clock) -> None:
    tokens = 50
    callers = 200
    limiter = TokenBucketLimiter(tokens, 1, clock=fake_clock)
    barrier = threading.Barrier(callers)
    results: list[bool] = []

    def _call() -> None:
        barrier.wait()
        results.append(limiter.allow_request())

    threads = [threading.Thread(target=_call) for _ in range(callers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == callers
    assert results.count(True) == tokens
    assert limiter.available_tokens == 0


def test_uses_real_clock_by_default() -> None:
    limiter = TokenBucketLimiter(2, 1)

    assert limiter.allow_request() is True
    assert limiter.allow_request() is True
    assert limiter.allow_request() is False


@pytest.mark.parametrize(
    ("capacity", "refill_rate", "field"),
    [
        (0, 1, "capacity"),
        (-3, 1, "capacity"),
        (1, 0, "refill_rate"),
        (1, -1, "refill_rate"),
        (1.5, 1, "capacity"),
        (True, 1, "capacity"),
        (1, "5", "refill_rate"),
    ],
)
def test_invalid_constructor_args(capacity, refill_rate, field: str) -> None:
    with pytest.raises(LimiterConfigError) as exc_info:
        TokenBucketLimiter(capacity, refill_rate)

    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.code == "invalid_limiter_config"
    assert exc_info.value.details is not None
    assert exc_info.value.details["field"] == field
