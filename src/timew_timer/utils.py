"""Shared utility functions for timew-timer."""

from datetime import UTC, datetime

# Timestamp format used by `timew export`
TIMEW_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def parse_timew_timestamp(value: str) -> datetime:
    """
    Parse a TimeWarrior export timestamp such as "20250101T120000Z".

    Args:
        value: Timestamp string in UTC

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the string is not in TimeWarrior format
    """
    return datetime.strptime(value, TIMEW_TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def format_timew_timestamp(ts: datetime) -> str:
    """Format a datetime the way `timew export` does."""
    return ts.astimezone(UTC).strftime(TIMEW_TIMESTAMP_FORMAT)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def format_elapsed(seconds: int) -> str:
    """Format a number of seconds as H:MM:SS."""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}:{minutes:02d}:{seconds % 60:02d}"


def ts2str(ts: datetime, format: str = "%FT%H:%M:%S") -> str:
    """Format a datetime as a string in the local timezone."""
    return ts.astimezone().strftime(format)


def ts2strtime(ts: datetime | None) -> str:
    """Format a datetime as time-only string (HH:MM:SS)."""
    if not ts:
        return "XX:XX:XX"
    return ts2str(ts, "%H:%M:%S")
