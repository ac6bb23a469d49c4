from .leetcode import LeetCodeClient, LeetCodeAPIError, get_leetcode_client
from .discord import DiscordNotifier, get_discord_notifier

__all__ = [
    "LeetCodeClient",
    "LeetCodeAPIError",
    "get_leetcode_client",
    "DiscordNotifier",
    "get_discord_notifier",
]
