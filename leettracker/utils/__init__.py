"""Utility modules for LeetCode Tracker."""

from .datetime_utils import (
    get_local_tz,
    get_local_now,
    to_local,
    start_of_day_timestamp,
    today_bounds,
    yesterday_bounds,
)

__all__ = [
    "get_local_tz",
    "get_local_now",
    "to_local",
    "start_of_day_timestamp",
    "today_bounds",
    "yesterday_bounds",
]
