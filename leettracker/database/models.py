"""
SQLAlchemy models for the tracking store.

Schema includes:
- Tracked accounts (one LeetCode link per member per guild)
- Guild settings (announcement channel)
- Solved problems (the announcement ledger, one row per member/guild/problem)
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class TrackedAccountDB(Base):
    """A Discord member's LeetCode account, tracked within one guild."""

    __tablename__ = "tracked_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    discord_id: Mapped[str] = mapped_column(String(32), nullable=False)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    leetcode_username: Mapped[str] = mapped_column(String(100), nullable=False)

    # Watermark: newest submission timestamp already inspected (0 = never polled)
    last_submission_timestamp: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Cached profile aggregates
    total_solved: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    linked_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("discord_id", "guild_id", name="uq_tracked_account_member_guild"),
        Index("idx_tracked_accounts_guild", "guild_id"),
        Index("idx_tracked_accounts_username", "leetcode_username"),
    )

    def __repr__(self) -> str:
        return (
            f"<TrackedAccountDB {self.discord_id}@{self.guild_id} "
            f"-> {self.leetcode_username} (last_seen={self.last_submission_timestamp})>"
        )


class GuildSettingsDB(Base):
    """Per-guild announcement destination."""

    __tablename__ = "guild_settings"

    guild_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # NULL means announcements are suppressed for the guild
    log_channel_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class SolvedProblemDB(Base):
    """Announcement ledger. Never updated, never deleted."""

    __tablename__ = "solved_problems"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    discord_id: Mapped[str] = mapped_column(String(32), nullable=False)
    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    problem_title: Mapped[str] = mapped_column(String(300), nullable=False)
    problem_slug: Mapped[str] = mapped_column(String(300), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), default="Unknown", nullable=False)

    # External solve time (Unix seconds), not the local insert time
    solved_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("discord_id", "guild_id", "problem_slug", name="uq_solved_problem"),
        Index("idx_solved_problems_guild_time", "guild_id", "solved_at"),
        Index("idx_solved_problems_member_time", "discord_id", "guild_id", "solved_at"),
    )

    def __repr__(self) -> str:
        return f"<SolvedProblemDB {self.discord_id}@{self.guild_id} {self.problem_slug} at {self.solved_at}>"
