"""Shared datetime helpers for enforcing UTC awareness."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def epoch_now() -> int:
    """Return the current time as whole seconds since the epoch."""

    return int(utc_now().timestamp())


def from_epoch(seconds: int) -> datetime:
    """Convert epoch seconds into an aware UTC datetime."""

    return datetime.fromtimestamp(seconds, tz=UTC)
