"""
Activity monitor: polls LeetCode and announces new accepted solves.

Each cycle:
1. Loads every tracked account
2. Groups accounts by LeetCode username (one fetch per username)
3. Diffs each account's batch against its watermark
4. Records new solves in the ledger and announces the ones not seen before

The first poll of an account only sets its watermark (baseline pass), so
linking never floods a channel with old solves.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Sequence, Callable, Awaitable

import pytz

from config import settings
from ..database.models import TrackedAccountDB
from ..database.repositories.tracking import get_tracking_repository, TrackingRepository
from ..database.repositories.solves import get_solved_problem_repository, SolvedProblemRepository
from ..database.exceptions import DatabaseError
from ..integrations.leetcode import get_leetcode_client, LeetCodeClient, LeetCodeAPIError
from ..integrations.discord import get_discord_notifier, DiscordNotifier
from ..models.leetcode import Submission, LeetCodeProfile
from ..models.messages import build_solve_announcement

logger = logging.getLogger(__name__)


@dataclass
class CycleStats:
    """Counters for one monitor cycle."""
    started_at: datetime = field(default_factory=lambda: datetime.now(pytz.UTC))
    finished_at: Optional[datetime] = None
    accounts: int = 0
    usernames: int = 0
    fetch_failures: int = 0
    account_failures: int = 0
    baselines: int = 0
    recorded: int = 0
    announced: int = 0

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "accounts": self.accounts,
            "usernames": self.usernames,
            "fetch_failures": self.fetch_failures,
            "account_failures": self.account_failures,
            "baselines": self.baselines,
            "recorded": self.recorded,
            "announced": self.announced,
        }


def group_by_username(accounts: Sequence[TrackedAccountDB]) -> Dict[str, List[TrackedAccountDB]]:
    """Map LeetCode username -> accounts linked to it, in first-seen order."""
    groups: Dict[str, List[TrackedAccountDB]] = {}
    for account in accounts:
        groups.setdefault(account.leetcode_username, []).append(account)
    return groups


class ActivityMonitor:
    """
    Detects new LeetCode solves for every tracked account.

    Cycles never overlap: a trigger that arrives while a cycle is running
    is skipped.
    """

    def __init__(
        self,
        tracking: Optional[TrackingRepository] = None,
        solves: Optional[SolvedProblemRepository] = None,
        leetcode: Optional[LeetCodeClient] = None,
        notifier: Optional[DiscordNotifier] = None,
        submission_limit: Optional[int] = None,
        request_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.tracking = tracking or get_tracking_repository()
        self.solves = solves or get_solved_problem_repository()
        self.leetcode = leetcode or get_leetcode_client()
        self.notifier = notifier or get_discord_notifier()
        self.submission_limit = submission_limit or settings.poll_submission_limit
        self.request_delay = (
            request_delay if request_delay is not None else settings.poll_request_delay_seconds
        )
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self.last_cycle: Optional[CycleStats] = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    group_by_username = staticmethod(group_by_username)

    async def run_cycle(self) -> Optional[CycleStats]:
        """
        Run one polling cycle.

        Returns:
            Cycle counters, or None if a previous cycle was still running
        """
        if self._lock.locked():
            logger.warning("Previous monitor cycle still running, skipping this trigger")
            return None

        async with self._lock:
            stats = CycleStats()
            await self._poll_all(stats)
            stats.finished_at = datetime.now(pytz.UTC)
            self.last_cycle = stats

        logger.info(
            f"Monitor cycle done: {stats.accounts} account(s), {stats.usernames} username(s), "
            f"{stats.recorded} new solve(s), {stats.announced} announced, "
            f"{stats.fetch_failures} fetch failure(s)"
        )
        return stats

    async def _poll_all(self, stats: CycleStats) -> None:
        accounts = await self.tracking.list_accounts()
        stats.accounts = len(accounts)
        if not accounts:
            logger.debug("No tracked accounts, nothing to poll")
            return

        groups = group_by_username(accounts)
        stats.usernames = len(groups)
        logger.info(f"Checking {len(accounts)} tracked account(s) across {len(groups)} username(s)")

        for index, (username, entries) in enumerate(groups.items()):
            if index > 0 and self.request_delay > 0:
                await self._sleep(self.request_delay)

            try:
                submissions = await self.leetcode.fetch_recent_submissions(
                    username, limit=self.submission_limit
                )
            except LeetCodeAPIError as e:
                stats.fetch_failures += 1
                logger.warning(f"Error checking {username}: {e}")
                continue

            profiles: Dict[str, Optional[LeetCodeProfile]] = {}
            for account in entries:
                try:
                    stats.announced += await self.process_account(
                        account, submissions, stats=stats, profiles=profiles
                    )
                except Exception as e:
                    stats.account_failures += 1
                    logger.error(
                        f"Error processing {username} for {account.discord_id}@{account.guild_id}: {e}",
                        exc_info=True,
                    )

    async def process_account(
        self,
        account: TrackedAccountDB,
        submissions: Sequence[Submission],
        stats: Optional[CycleStats] = None,
        profiles: Optional[Dict[str, Optional[LeetCodeProfile]]] = None,
    ) -> int:
        """
        Evaluate one account against a freshly fetched submission batch.

        Args:
            profiles: Per-cycle profile cache shared by accounts with the
                same username

        Returns:
            Number of announcements pushed
        """
        if not submissions:
            return 0

        discord_id = account.discord_id
        guild_id = account.guild_id
        username = account.leetcode_username
        watermark = account.last_submission_timestamp or 0
        newest = max(s.timestamp for s in submissions)

        if watermark == 0:
            await self.tracking.update_watermark(discord_id, guild_id, newest)
            if stats:
                stats.baselines += 1
            logger.info(f"Set baseline for {username} in guild {guild_id} at {newest}")
            return 0

        new_solves = [s for s in submissions if s.is_accepted and s.timestamp > watermark]
        if not new_solves:
            return 0

        current = await self.tracking.get_account(discord_id, guild_id)
        if current is None or current.leetcode_username != username:
            logger.warning(f"{username} for {discord_id}@{guild_id} was unlinked during the cycle, skipping")
            return 0

        # Batch maximum, accepted or not
        await self.tracking.update_watermark(discord_id, guild_id, newest)

        profile = await self._refresh_profile(account, profiles)

        channel_id = await self.tracking.get_log_channel(guild_id)
        if not channel_id:
            logger.debug(f"No log channel for guild {guild_id}, announcements suppressed")

        announced = 0
        for solve in sorted(new_solves, key=lambda s: s.timestamp):
            difficulty = await self.leetcode.fetch_problem_difficulty(solve.slug)

            is_new = await self.solves.record_solve(
                discord_id,
                guild_id,
                problem_title=solve.title,
                problem_slug=solve.slug,
                difficulty=difficulty.value,
                solved_at=solve.timestamp,
            )
            if not is_new:
                continue
            if stats:
                stats.recorded += 1

            if not channel_id:
                continue

            message = build_solve_announcement(discord_id, solve, difficulty, profile)
            if await self.notifier.post(channel_id, message):
                announced += 1
            else:
                logger.warning(f"Announcement of {solve.slug} for {discord_id} failed in guild {guild_id}")

        return announced

    async def _refresh_profile(
        self,
        account: TrackedAccountDB,
        profiles: Optional[Dict[str, Optional[LeetCodeProfile]]] = None,
    ) -> Optional[LeetCodeProfile]:
        """Fetch the profile and cache its aggregates. Failures are logged only."""
        username = account.leetcode_username
        if profiles is not None and username in profiles:
            profile = profiles[username]
        else:
            profile = await self._fetch_profile(username)
            if profiles is not None:
                profiles[username] = profile

        if profile is None:
            return None

        try:
            await self.tracking.update_stats(
                account.discord_id,
                account.guild_id,
                profile.stats.total,
                profile.streak,
            )
        except DatabaseError as e:
            logger.warning(f"Could not cache stats for {account.discord_id}@{account.guild_id}: {e}")

        return profile

    async def _fetch_profile(self, username: str) -> Optional[LeetCodeProfile]:
        try:
            profile = await self.leetcode.fetch_profile(username)
        except LeetCodeAPIError as e:
            logger.warning(f"Could not refresh profile for {username}: {e}")
            return None

        if profile is None:
            logger.warning(f"LeetCode profile {username} no longer exists")
        return profile


# Singleton
_activity_monitor: Optional[ActivityMonitor] = None


def get_activity_monitor() -> ActivityMonitor:
    """Get the activity monitor singleton."""
    global _activity_monitor
    if _activity_monitor is None:
        _activity_monitor = ActivityMonitor()
    return _activity_monitor
