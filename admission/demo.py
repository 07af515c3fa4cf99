"""Sample drivers printing allow/deny sequences for each limiter.

Commands:
  - token: 15 back-to-back calls against a (capacity=10, refill=5/s) token bucket
  - leaky: 10 calls spaced 200 ms apart against a (capacity=5, leak=1/s) leaky bucket
  - global: 15 back-to-back calls for one caller against a (25, 15, 3, 1) two-tier limiter

Run with ``python -m admission.demo <command>``.
"""

from __future__ import annotations

import time

import typer

from admission.adapters.rate_limit import GlobalRateLimiter, LeakyBucketLimiter, TokenBucketLimiter
from admission.core.errors import LimiterConfigError

app = typer.Typer(help="Print allow/deny sequences for the in-process limiters.")


def _report(index: int, allowed: bool, suffix: str = "") -> None:
    label = "allowed" if allowed else "denied"
    color = typer.colors.GREEN if allowed else typer.colors.RED
    typer.secho(f"Request {index} {label}{suffix}", fg=color)


@app.command()
def token(
    requests: int = typer.Option(15, help="Number of calls to make."),
    capacity: int = typer.Option(10, help="Bucket capacity."),
    refill_rate: int = typer.Option(5, help="Tokens added per second."),
    delay_ms: int = typer.Option(0, help="Pause between calls in milliseconds."),
) -> None:
    """Drive a token bucket; the first `capacity` calls pass as a burst."""
    try:
        limiter = TokenBucketLimiter(capacity, refill_rate)
    except LimiterConfigError as exc:
        raise typer.BadParameter(exc.message) from exc

    for i in range(1, requests + 1):
        _report(i, limiter.allow_request())
        if delay_ms:
            time.sleep(delay_ms / 1000)


@app.command()
def leaky(
    requests: int = typer.Option(10, help="Number of calls to make."),
    capacity: int = typer.Option(5, help="Queue capacity."),
    leak_rate: int = typer.Option(1, help="Queue entries drained per second."),
    delay_ms: int = typer.Option(200, help="Pause between calls in milliseconds."),
) -> None:
    """Drive a leaky bucket; admissions settle at `leak_rate` per second."""
    try:
        limiter = LeakyBucketLimiter(capacity, leak_rate)
    except LimiterConfigError as exc:
        raise typer.BadParameter(exc.message) from exc

    with limiter:
        for i in range(1, requests + 1):
            allowed = limiter.allow_request()
            _report(i, allowed, "" if allowed else " (bucket is full)")
            time.sleep(delay_ms / 1000)


@app.command(name="global")
def global_(
    requests: int = typer.Option(15, help="Number of calls to make."),
    identity: str = typer.Option("User1", help="Caller identity to use."),
    global_capacity: int = typer.Option(25, help="Capacity of the shared bucket."),
    global_refill_rate: int = typer.Option(15, help="Refill rate of the shared bucket."),
    identity_capacity: int = typer.Option(3, help="Capacity of each caller's bucket."),
    identity_refill_rate: int = typer.Option(1, help="Refill rate of each caller's bucket."),
) -> None:
    """Drive the two-tier limiter for a single caller."""
    try:
        limiter = GlobalRateLimiter(
            global_capacity, global_refill_rate, identity_capacity, identity_refill_rate
        )
    except LimiterConfigError as exc:
        raise typer.BadParameter(exc.message) from exc

    for i in range(1, requests + 1):
        _report(i, limiter.allow_request(identity), f" for user {identity}")


if __name__ == "__main__":
    app()
