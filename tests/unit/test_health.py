"""
Unit tests for the health and job trigger endpoints.
"""

import pytest
from fastapi import HTTPException
from unittest.mock import AsyncMock, Mock, patch

from leettracker import main
from leettracker.scheduler.monitor import CycleStats


@pytest.fixture
def scheduler():
    manager = Mock()
    manager.running = True
    manager.get_job_status.return_value = {"activity_monitor": {"next_run": None}}
    manager.reports.get_latch_status.return_value = {"daily_recap": {"fired_for": None}}
    manager.monitor.is_running = False
    manager.monitor.last_cycle = CycleStats(accounts=3, announced=1)
    return manager


@pytest.mark.asyncio
async def test_health_reports_components(scheduler):
    db = Mock()
    db.health_check = AsyncMock(return_value={"status": "healthy", "dialect": "sqlite"})

    with patch.object(main, "get_database", return_value=db), \
         patch.object(main, "get_scheduler_manager", return_value=scheduler), \
         patch.object(main, "get_discord_bot", return_value=None):
        result = await main.health_check()

    assert result["status"] == "healthy"
    assert result["services"]["discord_bot"] == "not_configured"
    assert result["services"]["scheduler"] == "running"
    assert "activity_monitor" in result["jobs"]
    assert result["monitor"]["last_cycle"]["accounts"] == 3


@pytest.mark.asyncio
async def test_health_degraded_when_database_down(scheduler):
    db = Mock()
    db.health_check = AsyncMock(return_value={"status": "unhealthy", "error": "locked"})
    scheduler.monitor.last_cycle = None

    with patch.object(main, "get_database", return_value=db), \
         patch.object(main, "get_scheduler_manager", return_value=scheduler), \
         patch.object(main, "get_discord_bot", return_value=None):
        result = await main.health_check()

    assert result["status"] == "degraded"
    assert result["monitor"]["last_cycle"] is None


@pytest.mark.asyncio
async def test_trigger_job(scheduler):
    scheduler.trigger_job.return_value = True

    with patch.object(main, "get_scheduler_manager", return_value=scheduler):
        result = await main.trigger_job("activity_monitor")

    assert result["ok"] is True
    scheduler.trigger_job.assert_called_once_with("activity_monitor")


@pytest.mark.asyncio
async def test_trigger_unknown_job_is_404(scheduler):
    scheduler.trigger_job.return_value = False

    with patch.object(main, "get_scheduler_manager", return_value=scheduler), \
         pytest.raises(HTTPException) as exc_info:
        await main.trigger_job("nope")

    assert exc_info.value.status_code == 404
