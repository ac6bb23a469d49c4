"""
Tracking service: the administrative actions behind the slash commands.

Handles business logic for:
- Linking a member to a LeetCode account (validated, baseline seeded)
- Unlinking a member
- Choosing the guild's announcement channel
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..database.repositories.tracking import get_tracking_repository, TrackingRepository
from ..database.exceptions import DatabaseError
from ..integrations.leetcode import get_leetcode_client, LeetCodeClient, LeetCodeAPIError
from ..models.leetcode import LeetCodeProfile

logger = logging.getLogger(__name__)


class UnknownLeetCodeUserError(Exception):
    """The LeetCode username does not exist."""

    def __init__(self, username: str):
        super().__init__(f"LeetCode user not found: {username}")
        self.username = username


@dataclass
class LinkResult:
    """Outcome of a link action. baseline_timestamp is 0 when seeding failed."""
    profile: LeetCodeProfile
    previous_username: Optional[str] = None
    baseline_timestamp: int = 0


class TrackingService:
    """Service for tracked account administration."""

    def __init__(
        self,
        repo: Optional[TrackingRepository] = None,
        leetcode: Optional[LeetCodeClient] = None,
    ):
        self.repo = repo or get_tracking_repository()
        self.leetcode = leetcode or get_leetcode_client()

    async def link(self, discord_id: str, guild_id: str, username: str) -> LinkResult:
        """
        Link a member to a LeetCode username in a guild.

        Raises:
            UnknownLeetCodeUserError: LeetCode has no such user
            LeetCodeAPIError: LeetCode could not be reached to validate
        """
        username = username.strip()

        profile = await self.leetcode.fetch_profile(username)
        if profile is None:
            raise UnknownLeetCodeUserError(username)

        existing = await self.repo.get_account(discord_id, guild_id)
        await self.repo.link_account(discord_id, guild_id, username)

        baseline = await self._seed_baseline(discord_id, guild_id, profile)

        previous = existing.leetcode_username if existing else None
        if previous:
            logger.info(f"{discord_id}@{guild_id} re-linked from {previous} to {username}")

        return LinkResult(
            profile=profile,
            previous_username=previous,
            baseline_timestamp=baseline,
        )

    async def _seed_baseline(
        self,
        discord_id: str,
        guild_id: str,
        profile: LeetCodeProfile,
    ) -> int:
        """
        Set the watermark to the newest submission so nothing older is announced.

        Best-effort: on failure the watermark stays where it is and the
        monitor's baseline pass takes over.
        """
        latest = 0
        try:
            recent = await self.leetcode.fetch_recent_submissions(profile.username, limit=1)
            if recent:
                latest = max(s.timestamp for s in recent)
        except LeetCodeAPIError as e:
            logger.warning(f"Could not seed baseline for {profile.username}: {e}")

        try:
            await self.repo.update_stats(
                discord_id,
                guild_id,
                profile.stats.total,
                profile.streak,
                last_seen=latest or None,
            )
        except DatabaseError as e:
            logger.warning(f"Could not cache stats for {discord_id}@{guild_id}: {e}")
            return 0

        return latest

    async def unlink(self, discord_id: str, guild_id: str) -> Optional[str]:
        """
        Stop tracking a member in a guild.

        Returns:
            The username that was unlinked, or None if nothing was linked
        """
        account = await self.repo.get_account(discord_id, guild_id)
        if not account:
            return None

        if not await self.repo.unlink_account(discord_id, guild_id):
            return None
        return account.leetcode_username

    async def set_destination(self, guild_id: str, channel_id: Optional[str]) -> None:
        """Set (or clear, with None) where a guild's announcements go."""
        await self.repo.set_log_channel(guild_id, channel_id)


# Singleton
_tracking_service: Optional[TrackingService] = None


def get_tracking_service() -> TrackingService:
    """Get the tracking service singleton."""
    global _tracking_service
    if _tracking_service is None:
        _tracking_service = TrackingService()
    return _tracking_service
