"""
Tracked account and guild settings repository.

Stores:
- Which LeetCode account each member linked in each guild
- The per-account watermark and cached profile stats
- The per-guild announcement channel
"""

import logging
from typing import Optional, List, Tuple

from sqlalchemy import select, update, delete, case, func
from sqlalchemy.exc import SQLAlchemyError

from ..connection import Database, get_database
from ..models import TrackedAccountDB, GuildSettingsDB
from ..exceptions import DatabaseOperationError, AccountNotFoundError

logger = logging.getLogger(__name__)


class TrackingRepository:
    """Repository for tracked accounts and guild notification targets."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    # ==================== ACCOUNTS ====================

    async def get_account(self, discord_id: str, guild_id: str) -> Optional[TrackedAccountDB]:
        """Get the account a member linked in a guild."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TrackedAccountDB).where(
                    TrackedAccountDB.discord_id == discord_id,
                    TrackedAccountDB.guild_id == guild_id,
                )
            )
            return result.scalar_one_or_none()

    async def list_accounts(self) -> List[TrackedAccountDB]:
        """Get all tracked accounts across all guilds."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TrackedAccountDB).order_by(TrackedAccountDB.id)
            )
            return list(result.scalars().all())

    async def list_guild_accounts(self, guild_id: str) -> List[TrackedAccountDB]:
        """Get all tracked accounts in a guild, most recently linked first."""
        async with self.db.session() as session:
            result = await session.execute(
                select(TrackedAccountDB)
                .where(TrackedAccountDB.guild_id == guild_id)
                .order_by(TrackedAccountDB.linked_at.desc(), TrackedAccountDB.id.desc())
            )
            return list(result.scalars().all())

    async def link_account(
        self,
        discord_id: str,
        guild_id: str,
        leetcode_username: str,
    ) -> TrackedAccountDB:
        """
        Link a member to a LeetCode username (insert or overwrite).

        Re-linking the same username keeps the watermark and cached stats.
        Switching to a different username resets them, so the next poll is a
        baseline pass for the new account.
        """
        stmt = self.db.insert(TrackedAccountDB).values(
            discord_id=discord_id,
            guild_id=guild_id,
            leetcode_username=leetcode_username,
            last_submission_timestamp=0,
            total_solved=0,
            current_streak=0,
        )
        same_username = TrackedAccountDB.leetcode_username == stmt.excluded.leetcode_username
        stmt = stmt.on_conflict_do_update(
            index_elements=["discord_id", "guild_id"],
            set_={
                "leetcode_username": stmt.excluded.leetcode_username,
                "linked_at": func.now(),
                "last_submission_timestamp": case(
                    (same_username, TrackedAccountDB.last_submission_timestamp), else_=0
                ),
                "total_solved": case((same_username, TrackedAccountDB.total_solved), else_=0),
                "current_streak": case((same_username, TrackedAccountDB.current_streak), else_=0),
            },
        )

        try:
            async with self.db.session() as session:
                await session.execute(stmt)
                result = await session.execute(
                    select(TrackedAccountDB).where(
                        TrackedAccountDB.discord_id == discord_id,
                        TrackedAccountDB.guild_id == guild_id,
                    )
                )
                account = result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to link {discord_id}@{guild_id} to {leetcode_username}: {e}")
            raise DatabaseOperationError(f"Failed to link account for {discord_id}: {e}") from e

        logger.info(f"Linked {discord_id} in guild {guild_id} to LeetCode user {leetcode_username}")
        return account

    async def unlink_account(self, discord_id: str, guild_id: str) -> bool:
        """Remove a member's link. Returns False if there was nothing to remove."""
        async with self.db.session() as session:
            result = await session.execute(
                delete(TrackedAccountDB).where(
                    TrackedAccountDB.discord_id == discord_id,
                    TrackedAccountDB.guild_id == guild_id,
                )
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount > 0

        if removed:
            logger.info(f"Unlinked {discord_id} in guild {guild_id}")
        return removed

    async def update_watermark(self, discord_id: str, guild_id: str, timestamp: int) -> bool:
        """
        Advance the last-seen submission timestamp.

        Never moves the watermark backwards. Returns True if the row changed.
        """
        async with self.db.session() as session:
            result = await session.execute(
                update(TrackedAccountDB)
                .where(
                    TrackedAccountDB.discord_id == discord_id,
                    TrackedAccountDB.guild_id == guild_id,
                    TrackedAccountDB.last_submission_timestamp < timestamp,
                )
                .values(last_submission_timestamp=timestamp)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    async def update_stats(
        self,
        discord_id: str,
        guild_id: str,
        total_solved: int,
        streak: int,
        last_seen: Optional[int] = None,
    ) -> None:
        """Cache profile aggregates, optionally advancing the watermark too."""
        values = {
            "total_solved": max(total_solved, 0),
            "current_streak": max(streak, 0),
        }
        if last_seen is not None:
            values["last_submission_timestamp"] = case(
                (TrackedAccountDB.last_submission_timestamp < last_seen, last_seen),
                else_=TrackedAccountDB.last_submission_timestamp,
            )

        async with self.db.session() as session:
            result = await session.execute(
                update(TrackedAccountDB)
                .where(
                    TrackedAccountDB.discord_id == discord_id,
                    TrackedAccountDB.guild_id == guild_id,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise AccountNotFoundError(discord_id, guild_id)

    # ==================== GUILD SETTINGS ====================

    async def get_log_channel(self, guild_id: str) -> Optional[str]:
        """Get the announcement channel for a guild (None = suppressed)."""
        async with self.db.session() as session:
            result = await session.execute(
                select(GuildSettingsDB.log_channel_id).where(GuildSettingsDB.guild_id == guild_id)
            )
            return result.scalar_one_or_none()

    async def set_log_channel(self, guild_id: str, channel_id: Optional[str]) -> None:
        """Set or overwrite the announcement channel for a guild."""
        stmt = self.db.insert(GuildSettingsDB).values(guild_id=guild_id, log_channel_id=channel_id)
        stmt = stmt.on_conflict_do_update(
            index_elements=["guild_id"],
            set_={"log_channel_id": stmt.excluded.log_channel_id, "updated_at": func.now()},
        )

        try:
            async with self.db.session() as session:
                await session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to set log channel for guild {guild_id}: {e}")
            raise DatabaseOperationError(f"Failed to set log channel for guild {guild_id}: {e}") from e

        logger.info(f"Log channel for guild {guild_id} set to {channel_id}")

    async def list_log_channels(self) -> List[Tuple[str, str]]:
        """Get (guild_id, channel_id) for every guild with a configured channel."""
        async with self.db.session() as session:
            result = await session.execute(
                select(GuildSettingsDB.guild_id, GuildSettingsDB.log_channel_id)
                .where(GuildSettingsDB.log_channel_id.isnot(None))
                .order_by(GuildSettingsDB.guild_id)
            )
            return [(row[0], row[1]) for row in result.all()]


# Singleton
_tracking_repository: Optional[TrackingRepository] = None


def get_tracking_repository() -> TrackingRepository:
    """Get the tracking repository singleton."""
    global _tracking_repository
    if _tracking_repository is None:
        _tracking_repository = TrackingRepository()
    return _tracking_repository
