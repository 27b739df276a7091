"""Time utilities for post and user records."""

from datetime import UTC, datetime

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return ``moment`` (default: now) as a fixed-width ISO-8601 UTC string.

    The fixed width keeps lexical order equal to temporal order.
    """
    moment = moment or utcnow()
    return moment.astimezone(UTC).strftime(TIMESTAMP_FORMAT)
