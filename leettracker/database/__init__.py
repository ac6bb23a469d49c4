"""
Tracking store for the LeetCode Tracker.

Handles:
- Tracked accounts (member/guild -> LeetCode username, watermark, cached stats)
- Guild announcement channels
- The solved-problem ledger used for deduplication and daily reports

SQLite by default; PostgreSQL when DATABASE_URL points at one.
"""

from .connection import (
    get_database,
    Database,
    init_database,
    close_database,
)
from .models import (
    Base,
    TrackedAccountDB,
    GuildSettingsDB,
    SolvedProblemDB,
)

__all__ = [
    "get_database",
    "Database",
    "init_database",
    "close_database",
    "Base",
    "TrackedAccountDB",
    "GuildSettingsDB",
    "SolvedProblemDB",
]
