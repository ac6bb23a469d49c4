"""
Batch report scheduler for the time-of-day reports.

Two reports are posted to every guild with a log channel:
- Daily recap (morning): yesterday's top solvers from the ledger
- Streak nudge (evening): members with a live streak and no solve today

A minute tick checks the local hour against each report's window. A
DailyLatch per report makes it fire at most once per local calendar day.
Latches live in memory only: a restart inside a window can fire a report
again, and a window that passes entirely while the process is down is
skipped.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, List, Dict, Callable, Awaitable

import pytz

from config import settings
from ..database.repositories.tracking import get_tracking_repository, TrackingRepository
from ..database.repositories.solves import get_solved_problem_repository, SolvedProblemRepository
from ..integrations.leetcode import get_leetcode_client, LeetCodeClient, LeetCodeAPIError
from ..integrations.discord import get_discord_notifier, DiscordNotifier
from ..models.leetcode import LeetCodeProfile
from ..models.messages import build_daily_recap, build_streak_alert
from ..utils.datetime_utils import get_local_tz, get_local_now, to_local, today_bounds, yesterday_bounds

logger = logging.getLogger(__name__)


@dataclass
class DailyLatch:
    """Once-per-day trigger over an hour window [start_hour, end_hour)."""
    name: str
    start_hour: int
    end_hour: int
    fired_for: Optional[date] = None

    def in_window(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour

    def should_fire(self, today: date, hour: int) -> bool:
        """
        Latch transition.

        Returns True (and marks the day as fired) only for the first call
        inside the window on a given day.
        """
        if not self.in_window(hour) or self.fired_for == today:
            return False
        self.fired_for = today
        return True

    def to_dict(self) -> dict:
        return {
            "window": f"{self.start_hour:02d}:00-{self.end_hour:02d}:00",
            "fired_for": self.fired_for.isoformat() if self.fired_for else None,
        }


@dataclass
class AtRiskMember:
    """A member whose streak ends unless they solve something today."""
    discord_id: str
    leetcode_username: str
    streak: int


class BatchReportScheduler:
    """Fires the daily recap and the streak nudge."""

    def __init__(
        self,
        tracking: Optional[TrackingRepository] = None,
        solves: Optional[SolvedProblemRepository] = None,
        leetcode: Optional[LeetCodeClient] = None,
        notifier: Optional[DiscordNotifier] = None,
        tz: Optional[pytz.BaseTzInfo] = None,
        request_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.tracking = tracking or get_tracking_repository()
        self.solves = solves or get_solved_problem_repository()
        self.leetcode = leetcode or get_leetcode_client()
        self.notifier = notifier or get_discord_notifier()
        self.timezone = tz or get_local_tz()
        self.request_delay = (
            request_delay if request_delay is not None else settings.nudge_request_delay_seconds
        )
        self._sleep = sleep

        self.recap = DailyLatch(
            "daily_recap",
            settings.recap_window_start_hour,
            settings.recap_window_end_hour,
        )
        self.nudge = DailyLatch(
            "streak_nudge",
            settings.nudge_window_start_hour,
            settings.nudge_window_end_hour,
        )

    def _local(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return get_local_now(self.timezone)
        return to_local(now, self.timezone)

    async def tick(self, now: Optional[datetime] = None) -> List[str]:
        """
        Check both windows and run whichever report is due.

        Returns:
            Names of the reports fired by this tick
        """
        now = self._local(now)
        today, hour = now.date(), now.hour
        fired = []

        if self.recap.should_fire(today, hour):
            fired.append(self.recap.name)
            try:
                await self.send_daily_recap(now)
            except Exception as e:
                logger.error(f"Daily recap failed: {e}", exc_info=True)

        if self.nudge.should_fire(today, hour):
            fired.append(self.nudge.name)
            try:
                await self.send_streak_nudge(now)
            except Exception as e:
                logger.error(f"Streak nudge failed: {e}", exc_info=True)

        return fired

    async def send_daily_recap(self, now: Optional[datetime] = None) -> int:
        """
        Post yesterday's top solvers in each guild's log channel.

        Returns:
            Number of guilds posted to
        """
        start, end = yesterday_bounds(self._local(now), self.timezone)
        logger.info("Sending daily recap...")

        posted = 0
        for guild_id, channel_id in await self.tracking.list_log_channels():
            try:
                top_solvers = await self.solves.top_solvers_between(
                    guild_id, start, end, limit=settings.recap_top_n
                )
                if not top_solvers:
                    continue

                if await self.notifier.post(channel_id, build_daily_recap(top_solvers)):
                    posted += 1
            except Exception as e:
                logger.error(f"Recap error for guild {guild_id}: {e}")

        logger.info(f"Daily recap posted to {posted} guild(s)")
        return posted

    async def find_at_risk_members(
        self,
        guild_id: str,
        now: Optional[datetime] = None,
    ) -> List[AtRiskMember]:
        """Members with a live streak and no recorded solve since local midnight."""
        start_of_today, _ = today_bounds(self._local(now), self.timezone)
        accounts = await self.tracking.list_guild_accounts(guild_id)

        profiles: Dict[str, Optional[LeetCodeProfile]] = {}
        at_risk = []

        for account in accounts:
            username = account.leetcode_username

            if username not in profiles:
                if profiles and self.request_delay > 0:
                    await self._sleep(self.request_delay)
                try:
                    profiles[username] = await self.leetcode.fetch_profile(username)
                except LeetCodeAPIError as e:
                    logger.warning(f"Could not fetch streak for {username}: {e}")
                    profiles[username] = None

            profile = profiles[username]
            if not profile or profile.streak <= 0:
                continue

            solved_today = await self.solves.count_solves_since(
                account.discord_id, guild_id, start_of_today
            )
            if solved_today == 0:
                at_risk.append(AtRiskMember(account.discord_id, username, profile.streak))

        return at_risk

    async def send_streak_nudge(self, now: Optional[datetime] = None) -> int:
        """
        Warn members whose streaks are at risk, one message per guild.

        Returns:
            Number of guilds posted to
        """
        now = self._local(now)
        logger.info("Checking streaks...")

        posted = 0
        for guild_id, channel_id in await self.tracking.list_log_channels():
            try:
                at_risk = await self.find_at_risk_members(guild_id, now)
                if not at_risk:
                    continue

                message = build_streak_alert([(m.discord_id, m.streak) for m in at_risk])
                if await self.notifier.post(channel_id, message):
                    posted += 1
                    logger.info(f"Streak alert for {len(at_risk)} member(s) in guild {guild_id}")
            except Exception as e:
                logger.error(f"Streak nudge error for guild {guild_id}: {e}")

        return posted

    def get_latch_status(self) -> dict:
        return {
            self.recap.name: self.recap.to_dict(),
            self.nudge.name: self.nudge.to_dict(),
        }


# Singleton
_report_scheduler: Optional[BatchReportScheduler] = None


def get_report_scheduler() -> BatchReportScheduler:
    """Get the batch report scheduler singleton."""
    global _report_scheduler
    if _report_scheduler is None:
        _report_scheduler = BatchReportScheduler()
    return _report_scheduler
