"""Business services for LeetCode Tracker."""

from .tracking import (
    TrackingService,
    LinkResult,
    UnknownLeetCodeUserError,
    get_tracking_service,
)

__all__ = [
    "TrackingService",
    "LinkResult",
    "UnknownLeetCodeUserError",
    "get_tracking_service",
]
