"""
LeetCode Tracker - Main Application Entry Point

FastAPI application hosting the background scheduler and the Discord bot.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException

from config import settings
from . import __version__
from .database import init_database, close_database, get_database
from .scheduler.jobs import get_scheduler_manager
from .integrations.discord_bot import get_discord_bot, start_discord_bot, stop_discord_bot

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    # Startup
    logger.info(f"Starting {settings.app_name}...")

    if await init_database():
        logger.info("Database initialized")
    else:
        logger.error("Database failed to initialize, polling will fail until it is reachable")

    try:
        scheduler = get_scheduler_manager()
        scheduler.start()
    except Exception as e:
        logger.warning(f"Scheduler failed: {e}")

    discord_bot_task = None
    if settings.discord_bot_token:
        discord_bot_task = asyncio.create_task(start_discord_bot())
        logger.info("Discord bot starting in background")
    else:
        logger.warning("DISCORD_BOT_TOKEN not set: slash commands and announcements disabled")

    logger.info(f"{settings.app_name} started successfully!")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")

    try:
        await stop_discord_bot()
        if discord_bot_task:
            discord_bot_task.cancel()
            try:
                await discord_bot_task
            except asyncio.CancelledError:
                pass
    except Exception as e:
        logger.warning(f"Error stopping Discord bot: {e}")

    try:
        get_scheduler_manager().stop()
    except Exception as e:
        logger.warning(f"Failed to stop scheduler during shutdown: {e}")

    try:
        await close_database()
    except Exception as e:
        logger.warning(f"Failed to close database during shutdown: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Polls LeetCode and announces new solves, recaps and streak alerts in Discord",
    version=__version__,
    lifespan=lifespan
)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": __version__
    }


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    db_health = await get_database().health_check()

    discord_bot = get_discord_bot()
    discord_bot_status = "not_configured"
    if discord_bot:
        discord_bot_status = "connected" if discord_bot.is_ready() else "disconnected"

    scheduler = get_scheduler_manager()
    last_cycle = scheduler.monitor.last_cycle

    return {
        "status": "healthy" if db_health.get("status") == "healthy" else "degraded",
        "timestamp": datetime.now().isoformat(),
        "services": {
            "database": db_health,
            "discord_bot": discord_bot_status,
            "scheduler": "running" if scheduler.running else "stopped",
        },
        "jobs": scheduler.get_job_status(),
        "reports": scheduler.reports.get_latch_status(),
        "monitor": {
            "cycle_running": scheduler.monitor.is_running,
            "last_cycle": last_cycle.to_dict() if last_cycle else None,
        },
    }


@app.post("/api/trigger-job/{job_id}")
async def trigger_job(job_id: str):
    """Manually trigger a scheduled job (activity_monitor or report_tick)."""
    scheduler = get_scheduler_manager()

    if scheduler.trigger_job(job_id):
        return {"ok": True, "message": f"Job {job_id} triggered"}
    raise HTTPException(status_code=404, detail=f"Job {job_id} not found")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "leettracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
