"""Tests for limiter settings loading and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from admission.core.config import LimiterSettings, LogSettings


def test_defaults_match_sample_two_tier_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LIMITER_GLOBAL_CAPACITY",
        "LIMITER_GLOBAL_REFILL_RATE",
        "LIMITER_IDENTITY_CAPACITY",
        "LIMITER_IDENTITY_REFILL_RATE",
    ):
        monkeypatch.delenv(name, raising=False)

    limits = LimiterSettings()

    assert limits.global_capacity == 25
    assert limits.global_refill_rate == 15
    assert limits.identity_capacity == 3
    assert limits.identity_refill_rate == 1


def test_reads_limits_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIMITER_IDENTITY_CAPACITY", "7")
    monkeypatch.setenv("LIMITER_GLOBAL_REFILL_RATE", "100")

    limits = LimiterSettings()

    assert limits.identity_capacity == 7
    assert limits.global_refill_rate == 100


@pytest.mark.parametrize(
    "env",
    [
        {"LIMITER_GLOBAL_CAPACITY": "0"},
        {"LIMITER_IDENTITY_REFILL_RATE": "-1"},
        {"LIMITER_IDENTITY_CAPACITY": "lots"},
    ],
)
def test_rejects_invalid_limits(monkeypatch: pytest.MonkeyPatch, env: dict) -> None:
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    with pytest.raises(ValidationError):
        LimiterSettings()


def test_log_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_REQUEST_ID_HEADER", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)

    log = LogSettings()

    assert log.request_id_header == "X-Request-ID"
    assert log.format == "json"
