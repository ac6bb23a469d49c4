from .leetcode import (
    Difficulty,
    Submission,
    ProfileStats,
    LeetCodeProfile,
    DailyProblem,
    ACCEPTED_STATUS,
)
from .messages import (
    EmbedField,
    EmbedMessage,
    medal_for,
    difficulty_color,
    build_solve_announcement,
    build_daily_recap,
    build_streak_alert,
)

__all__ = [
    "Difficulty",
    "Submission",
    "ProfileStats",
    "LeetCodeProfile",
    "DailyProblem",
    "ACCEPTED_STATUS",
    "EmbedField",
    "EmbedMessage",
    "medal_for",
    "difficulty_color",
    "build_solve_announcement",
    "build_daily_recap",
    "build_streak_alert",
]
