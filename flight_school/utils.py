"""Time helpers shared by the scheduling engine."""

from datetime import datetime, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to timezone-aware UTC.

    Naive datetimes are taken to already be UTC.

    Examples:
        >>> ensure_utc(datetime(2025, 11, 10, 10, 0)).isoformat()
        '2025-11-10T10:00:00+00:00'
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_time(value: datetime) -> str:
    """
    Format a datetime for alert messages.

    Args:
        value: Datetime to format

    Returns:
        Formatted string like "Mon 2025-11-10 10:00 UTC"

    Examples:
        >>> format_time(datetime(2025, 11, 10, 10, 0, tzinfo=timezone.utc))
        'Mon 2025-11-10 10:00 UTC'
    """
    return ensure_utc(value).strftime("%a %Y-%m-%d %H:%M UTC")


def start_of_next_hour(value: datetime) -> datetime:
    """
    Round up to the next top of the hour, always moving forward.

    Examples:
        >>> start_of_next_hour(datetime(2025, 11, 10, 4, 1)).hour
        5
        >>> start_of_next_hour(datetime(2025, 11, 10, 5, 0)).hour
        6
    """
    return value.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
