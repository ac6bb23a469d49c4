"""LeetCode Tracker: LeetCode activity feed for Discord guilds."""

__version__ = "1.0.0"
