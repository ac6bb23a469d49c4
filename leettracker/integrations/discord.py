"""
Discord notification sink.

Posts embeds to guild channels through the Discord REST API using the bot
token, so announcements do not depend on the gateway connection being up.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from config import settings
from ..models.messages import EmbedMessage

logger = logging.getLogger(__name__)


class DiscordNotifier:
    """Pushes embeds to Discord channels."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.bot_token = bot_token if bot_token is not None else settings.discord_bot_token
        self.api_base = (api_base or settings.discord_api_base).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.discord_request_timeout)

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token)

    async def post(self, channel_id: str, message: EmbedMessage) -> bool:
        """
        Post one embed to a channel.

        Returns:
            True if Discord accepted the message, False otherwise (never raises)
        """
        if not self.enabled:
            logger.warning("Discord bot token not configured, dropping message")
            return False

        url = f"{self.api_base}/channels/{channel_id}/messages"
        headers = {
            "Authorization": f"Bot {self.bot_token}",
            "Content-Type": "application/json",
        }
        payload = {"embeds": [message.to_discord_embed_dict()]}

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, json=payload, headers=headers) as response:
                    if response.status in (200, 201):
                        logger.debug(f"Posted embed to channel {channel_id}")
                        return True

                    error = await response.text()
                    logger.error(
                        f"Discord API error posting to channel {channel_id}: "
                        f"{response.status} - {error[:200]}"
                    )
                    return False

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error posting to Discord channel {channel_id}: {e}")
            return False


# Singleton
_notifier: Optional[DiscordNotifier] = None


def get_discord_notifier() -> DiscordNotifier:
    """Get the Discord notifier singleton."""
    global _notifier
    if _notifier is None:
        _notifier = DiscordNotifier()
    return _notifier
