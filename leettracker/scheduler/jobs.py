"""
Scheduler manager for automated jobs.

Handles all scheduled tasks:
- Activity monitor (every 5 minutes, first run shortly after startup)
- Report tick (every minute: daily recap and streak nudge windows)
"""

import logging
from typing import Optional
from datetime import datetime, timedelta
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import pytz

from config import settings
from .monitor import ActivityMonitor, get_activity_monitor
from .reports import BatchReportScheduler, get_report_scheduler

logger = logging.getLogger(__name__)

MONITOR_JOB_ID = "activity_monitor"
REPORT_TICK_JOB_ID = "report_tick"


class SchedulerManager:
    """
    Manages all scheduled jobs for the tracker.
    """

    def __init__(
        self,
        monitor: Optional[ActivityMonitor] = None,
        reports: Optional[BatchReportScheduler] = None,
    ):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.timezone = pytz.timezone(settings.timezone)
        self.monitor = monitor or get_activity_monitor()
        self.reports = reports or get_report_scheduler()

    @property
    def running(self) -> bool:
        return bool(self.scheduler and self.scheduler.running)

    def start(self) -> None:
        """Start the scheduler with all jobs. Must be called inside a running event loop."""
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)

        # Activity monitor, never two cycles at once
        first_poll = datetime.now(self.timezone) + timedelta(
            seconds=settings.poll_initial_delay_seconds
        )
        self.scheduler.add_job(
            self._activity_monitor_job,
            IntervalTrigger(seconds=settings.poll_interval_seconds, timezone=self.timezone),
            id=MONITOR_JOB_ID,
            name="LeetCode Activity Monitor",
            next_run_time=first_poll,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        # Recap / nudge window check every minute
        self.scheduler.add_job(
            self._report_tick_job,
            IntervalTrigger(seconds=settings.report_tick_seconds, timezone=self.timezone),
            id=REPORT_TICK_JOB_ID,
            name="Daily Report Tick",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self.scheduler.start()
        logger.info(
            f"Scheduler started: monitor every {settings.poll_interval_seconds}s "
            f"(first in {settings.poll_initial_delay_seconds}s), "
            f"report tick every {settings.report_tick_seconds}s"
        )

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    async def _activity_monitor_job(self) -> None:
        """Run one activity monitor cycle."""
        try:
            await self.monitor.run_cycle()
        except Exception as e:
            logger.error(f"Error in activity monitor job: {e}", exc_info=True)

    async def _report_tick_job(self) -> None:
        """Fire any daily report whose window is open."""
        try:
            fired = await self.reports.tick()
            if fired:
                logger.info(f"Report tick fired: {', '.join(fired)}")
        except Exception as e:
            logger.error(f"Error in report tick job: {e}", exc_info=True)

    def trigger_job(self, job_id: str) -> bool:
        """Manually trigger a job."""
        if not self.scheduler:
            return False

        job = self.scheduler.get_job(job_id)
        if job:
            job.modify(next_run_time=datetime.now(self.timezone))
            return True

        return False

    def get_job_status(self) -> dict:
        """Get status of all scheduled jobs."""
        if not self.scheduler:
            return {}

        jobs = {}
        for job in self.scheduler.get_jobs():
            jobs[job.id] = {
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            }

        return jobs


# Singleton instance
_scheduler_manager: Optional[SchedulerManager] = None


def get_scheduler_manager() -> SchedulerManager:
    """Get the scheduler manager instance."""
    global _scheduler_manager
    if _scheduler_manager is None:
        _scheduler_manager = SchedulerManager()
    return _scheduler_manager
