"""
Solved problem repository (the announcement ledger).

Every announced solve is recorded here exactly once per
(member, guild, problem). The unique constraint does the deduplication:
callers never check for existence before inserting.
"""

import logging
from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from ..connection import Database, get_database
from ..models import SolvedProblemDB
from ..exceptions import DatabaseOperationError

logger = logging.getLogger(__name__)


class SolvedProblemRepository:
    """Repository for the solved-problem ledger."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_database()

    async def record_solve(
        self,
        discord_id: str,
        guild_id: str,
        problem_title: str,
        problem_slug: str,
        difficulty: str,
        solved_at: int,
    ) -> bool:
        """
        Insert a solve unless it is already recorded.

        Returns:
            True if the row was newly inserted, False if this
            (member, guild, problem) was already in the ledger.
        """
        stmt = (
            self.db.insert(SolvedProblemDB)
            .values(
                discord_id=discord_id,
                guild_id=guild_id,
                problem_title=problem_title,
                problem_slug=problem_slug,
                difficulty=difficulty,
                solved_at=solved_at,
            )
            .on_conflict_do_nothing(index_elements=["discord_id", "guild_id", "problem_slug"])
        )

        try:
            async with self.db.session() as session:
                result = await session.execute(stmt)
                inserted = result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to record solve {problem_slug} for {discord_id}@{guild_id}: {e}")
            raise DatabaseOperationError(f"Failed to record solve {problem_slug}: {e}") from e

        if not inserted:
            logger.debug(f"Solve {problem_slug} already recorded for {discord_id}@{guild_id}")
        return inserted

    async def top_solvers_between(
        self,
        guild_id: str,
        start: int,
        end: int,
        limit: int = 10,
    ) -> List[Tuple[str, int]]:
        """
        Count solves per member in [start, end) for a guild.

        Returns:
            (discord_id, count) pairs, highest count first.
        """
        solve_count = func.count(SolvedProblemDB.id).label("count")

        async with self.db.session() as session:
            result = await session.execute(
                select(SolvedProblemDB.discord_id, solve_count)
                .where(
                    SolvedProblemDB.guild_id == guild_id,
                    SolvedProblemDB.solved_at >= start,
                    SolvedProblemDB.solved_at < end,
                )
                .group_by(SolvedProblemDB.discord_id)
                .order_by(solve_count.desc(), SolvedProblemDB.discord_id)
                .limit(limit)
            )
            return [(row[0], int(row[1])) for row in result.all()]

    async def count_solves_since(self, discord_id: str, guild_id: str, since: int) -> int:
        """Count a member's recorded solves in a guild at or after `since`."""
        async with self.db.session() as session:
            result = await session.execute(
                select(func.count(SolvedProblemDB.id)).where(
                    SolvedProblemDB.discord_id == discord_id,
                    SolvedProblemDB.guild_id == guild_id,
                    SolvedProblemDB.solved_at >= since,
                )
            )
            return int(result.scalar() or 0)

    async def list_member_solves(
        self,
        discord_id: str,
        guild_id: str,
        limit: int = 20,
    ) -> List[SolvedProblemDB]:
        """Get a member's most recent recorded solves in a guild."""
        async with self.db.session() as session:
            result = await session.execute(
                select(SolvedProblemDB)
                .where(
                    SolvedProblemDB.discord_id == discord_id,
                    SolvedProblemDB.guild_id == guild_id,
                )
                .order_by(SolvedProblemDB.solved_at.desc())
                .limit(limit)
            )
            return list(result.scalars().all())


# Singleton
_solved_problem_repository: Optional[SolvedProblemRepository] = None


def get_solved_problem_repository() -> SolvedProblemRepository:
    """Get the solved problem repository singleton."""
    global _solved_problem_repository
    if _solved_problem_repository is None:
        _solved_problem_repository = SolvedProblemRepository()
    return _solved_problem_repository
