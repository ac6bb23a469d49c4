"""Polling and scheduled report jobs."""

from .monitor import ActivityMonitor, CycleStats, group_by_username, get_activity_monitor
from .reports import BatchReportScheduler, DailyLatch, AtRiskMember, get_report_scheduler
from .jobs import SchedulerManager, get_scheduler_manager

__all__ = [
    "ActivityMonitor",
    "CycleStats",
    "group_by_username",
    "get_activity_monitor",
    "BatchReportScheduler",
    "DailyLatch",
    "AtRiskMember",
    "get_report_scheduler",
    "SchedulerManager",
    "get_scheduler_manager",
]
