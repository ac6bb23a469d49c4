"""
Centralized datetime and timezone utilities.

Report windows and day boundaries are evaluated in the configured local
timezone; ledger timestamps are Unix seconds.
"""

from datetime import datetime, date, timedelta
from typing import Optional, Tuple
import pytz

from config import settings


def get_local_tz() -> pytz.BaseTzInfo:
    """Get the configured local timezone."""
    return pytz.timezone(settings.timezone)


def get_local_now(tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Get current time as an aware datetime in the local timezone."""
    return datetime.now(tz or get_local_tz())


def to_local(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Convert a datetime to aware local time.

    Naive datetimes are assumed to already be local wall-clock time.
    """
    tz = tz or get_local_tz()
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def start_of_day_timestamp(day: date, tz: Optional[pytz.BaseTzInfo] = None) -> int:
    """Unix timestamp of local midnight at the start of `day`."""
    tz = tz or get_local_tz()
    midnight = tz.localize(datetime(day.year, day.month, day.day))
    return int(midnight.timestamp())


def today_bounds(now: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> Tuple[int, int]:
    """[start of today, start of tomorrow) as Unix timestamps."""
    today = to_local(now, tz).date()
    return (
        start_of_day_timestamp(today, tz),
        start_of_day_timestamp(today + timedelta(days=1), tz),
    )


def yesterday_bounds(now: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> Tuple[int, int]:
    """[start of yesterday, start of today) as Unix timestamps."""
    today = to_local(now, tz).date()
    return (
        start_of_day_timestamp(today - timedelta(days=1), tz),
        start_of_day_timestamp(today, tz),
    )
