"""Time utilities for UTC timestamps and record dates."""

from datetime import date, datetime, timezone
from typing import Any, Optional


def utc_now_z() -> str:
    """
    Get current UTC time as ISO 8601 string with Z suffix.
    
    Returns:
        ISO 8601 UTC timestamp ending with 'Z' (e.g., '2025-12-23T00:27:07.804867Z')
    """
    return to_utc_z(datetime.now(timezone.utc))


def to_utc_z(dt: datetime) -> str:
    """
    Convert datetime to ISO 8601 UTC string with Z suffix.
    
    Args:
        dt: Datetime object (must be timezone-aware)
        
    Returns:
        ISO 8601 UTC timestamp ending with 'Z'
        
    Raises:
        ValueError: If datetime is naive (not timezone-aware)
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
        )
    
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat().replace('+00:00', 'Z')


def today_utc() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def parse_date(value: Any) -> Optional[date]:
    """
    Coerce a record date value to a calendar date.
    
    Accepts date/datetime objects and ISO 8601 strings ('2024-03-01',
    '2024-03-01T08:00:00Z'). Anything else, including malformed strings,
    yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_epoch_seconds(value: Any) -> Optional[float]:
    """Epoch seconds for a date-like value, None when it cannot be parsed."""
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return dt.timestamp()
    if isinstance(value, str) and "T" in value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_epoch_seconds(datetime.fromisoformat(text))
        except ValueError:
            pass
    day = parse_date(value)
    if day is None:
        return None
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp()


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end precedes start)."""
    return (end - start).days
