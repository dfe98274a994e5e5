"""Time and datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def format_datetime(dt: datetime, fmt: str = "%Y-%m-%dT%H:%M:%S.%fZ") -> str:
    """Format a datetime as an ISO-8601 UTC string.

    Naive datetimes are assumed to already be UTC (SQLite drops tzinfo).

    Args:
        dt: Datetime to format
        fmt: Format string

    Returns:
        Formatted datetime string
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(fmt)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime, leaving aware ones untouched."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
