"""Tests for the sample driver commands."""

from __future__ import annotations

from typer.testing import CliRunner

from admission.demo import app

runner = CliRunner()


def _count(output: str, word: str) -> int:
    return sum(1 for line in output.splitlines() if f" {word}" in line)


def test_token_command_shows_burst_then_denials() -> None:
    result = runner.invoke(app, ["token"])

    assert result.exit_code == 0
    assert _count(result.output, "allowed") == 10
    assert _count(result.output, "denied") == 5


def test_global_command_limits_single_user() -> None:
    result = runner.invoke(app, ["global"])

    assert result.exit_code == 0
    assert _count(result.output, "allowed") == 3
    assert _count(result.output, "denied") == 12
    assert "Request 1 allowed for user User1" in result.output


def test_leaky_command_denies_when_full() -> None:
    result = runner.invoke(app, ["leaky", "--requests", "7", "--delay-ms", "0"])

    assert result.exit_code == 0
    assert _count(result.output, "allowed") == 5
    assert "Request 6 denied (bucket is full)" in result.output


def test_invalid_limits_are_rejected() -> None:
    result = runner.invoke(app, ["token", "--capacity", "0"])

    assert result.exit_code != 0
