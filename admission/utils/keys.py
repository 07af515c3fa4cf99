"""Helpers for handling limiter keys in logs."""

from __future__ import annotations

from hashlib import sha256


def hash_limiter_key(key: str) -> str:
    """Hash a limiter key for logging without exposing the raw identity."""
    return sha256(key.encode()).hexdigest()[:16]
