"""
Unit tests for the scheduler manager (APScheduler wiring).
"""

import pytest
from unittest.mock import AsyncMock, Mock

from leettracker.scheduler.jobs import SchedulerManager, MONITOR_JOB_ID, REPORT_TICK_JOB_ID


@pytest.fixture
def scheduler_manager():
    monitor = Mock()
    monitor.run_cycle = AsyncMock()
    reports = Mock()
    reports.tick = AsyncMock(return_value=[])

    return SchedulerManager(monitor=monitor, reports=reports)


@pytest.mark.asyncio
async def test_start_registers_jobs(scheduler_manager):
    scheduler_manager.start()

    assert scheduler_manager.running
    status = scheduler_manager.get_job_status()
    assert set(status) == {MONITOR_JOB_ID, REPORT_TICK_JOB_ID}

    monitor_job = scheduler_manager.scheduler.get_job(MONITOR_JOB_ID)
    assert monitor_job.max_instances == 1
    assert monitor_job.trigger.interval.total_seconds() == 300
    assert scheduler_manager.scheduler.get_job(REPORT_TICK_JOB_ID).trigger.interval.total_seconds() == 60

    scheduler_manager.stop()


@pytest.mark.asyncio
async def test_stop(scheduler_manager):
    scheduler_manager.start()
    scheduler_manager.stop()

    assert not scheduler_manager.running


def test_job_status_before_start(scheduler_manager):
    assert scheduler_manager.get_job_status() == {}
    assert scheduler_manager.trigger_job(MONITOR_JOB_ID) is False


@pytest.mark.asyncio
async def test_monitor_job_runs_cycle(scheduler_manager):
    await scheduler_manager._activity_monitor_job()

    scheduler_manager.monitor.run_cycle.assert_awaited_once()


@pytest.mark.asyncio
async def test_monitor_job_swallows_errors(scheduler_manager):
    scheduler_manager.monitor.run_cycle.side_effect = RuntimeError("db gone")

    await scheduler_manager._activity_monitor_job()


@pytest.mark.asyncio
async def test_report_tick_job_swallows_errors(scheduler_manager):
    scheduler_manager.reports.tick.side_effect = RuntimeError("boom")

    await scheduler_manager._report_tick_job()

    scheduler_manager.reports.tick.assert_awaited_once()
