"""Date/time helpers.

Everything is timezone-aware UTC. Credential expiry is kept as epoch seconds
(what the token clock returns) and only rendered as text at the edges.
"""

from __future__ import annotations

from datetime import UTC, datetime

from .messages import ErrorMessages


def utcnow() -> datetime:
    """Returns a timezone-aware datetime in UTC."""
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
    return value.astimezone(UTC)


def from_epoch(seconds: float) -> datetime:
    return datetime.fromtimestamp(float(seconds), tz=UTC)


def iso_z(value: datetime) -> str:
    """RFC3339 with a trailing ``Z``, as browsers' ``Date.toISOString`` reads it."""
    return to_utc(value).isoformat().replace("+00:00", "Z")
