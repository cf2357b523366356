"""Timestamp encoding for TEXT columns.

All timestamps are stored as UTC ISO-8601 strings with microseconds so
that lexical comparison in SQL matches chronological order.
"""

from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Encode a datetime for storage or comparison in SQL."""
    return ensure_utc(value).isoformat(timespec="microseconds")


def parse_timestamp(value: str | datetime) -> datetime:
    """Decode a stored timestamp into an aware UTC datetime."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value))
