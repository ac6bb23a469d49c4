"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from leettracker.database.connection import Database
from leettracker.database.repositories.tracking import TrackingRepository
from leettracker.database.repositories.solves import SolvedProblemRepository
from leettracker.integrations.leetcode import LeetCodeClient
from leettracker.integrations.discord import DiscordNotifier
from leettracker.models.leetcode import Difficulty, Submission, LeetCodeProfile, ProfileStats


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite database file per test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    assert await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def tracking_repo(database):
    return TrackingRepository(database)


@pytest.fixture
def solves_repo(database):
    return SolvedProblemRepository(database)


@pytest.fixture
def make_submission():
    """Factory for Submission objects."""
    def _make(slug: str, timestamp: int, status: str = "Accepted", lang: str = "python3") -> Submission:
        return Submission(
            title=slug.replace("-", " ").title(),
            slug=slug,
            timestamp=timestamp,
            status=status,
            lang=lang,
        )
    return _make


@pytest.fixture
def make_profile():
    """Factory for LeetCodeProfile objects."""
    def _make(username: str, total: int = 100, streak: int = 0) -> LeetCodeProfile:
        return LeetCodeProfile(
            username=username,
            ranking=12345,
            avatar_url=f"https://assets.leetcode.com/users/{username}/avatar.png",
            streak=streak,
            stats=ProfileStats(easy=total // 2, medium=total // 3, hard=total - total // 2 - total // 3, total=total),
        )
    return _make


@pytest.fixture
def mock_leetcode():
    """LeetCode client mock. Every coroutine method is an AsyncMock."""
    client = AsyncMock(spec=LeetCodeClient)
    client.fetch_recent_submissions.return_value = []
    client.fetch_profile.return_value = None
    client.fetch_problem_difficulty.return_value = Difficulty.MEDIUM
    return client


@pytest.fixture
def mock_notifier():
    """Notification sink mock that accepts every message."""
    notifier = AsyncMock(spec=DiscordNotifier)
    notifier.post.return_value = True
    return notifier
