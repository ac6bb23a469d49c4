"""
Discord bot exposing the tracker's slash commands.

Commands:
- /link <username>      Link your LeetCode account in this server
- /untrack              Stop tracking your account in this server
- /setchannel [channel] Choose where announcements go (Manage Channels)
- /stats [user]         Live LeetCode stats for a member
- /daily                Today's daily challenge
- /leaderboard          Live server leaderboard
- /list                 Everyone linked in this server
- /help                 Command overview
- /ping                 Liveness check

Announcements themselves go out through the REST notifier, not through
this gateway connection.
"""

import asyncio
import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from config import settings
from ..database.exceptions import DatabaseError
from ..database.repositories.tracking import get_tracking_repository
from ..database.repositories.solves import get_solved_problem_repository
from ..models.messages import (
    EmbedMessage,
    build_error,
    build_notice,
    build_link_confirmation,
    build_unlink_confirmation,
    build_channel_confirmation,
    build_profile_stats,
    build_daily_problem,
    build_leaderboard,
    build_linked_accounts,
    build_help,
)
from ..services.tracking import get_tracking_service, UnknownLeetCodeUserError
from .leetcode import get_leetcode_client, LeetCodeAPIError

logger = logging.getLogger(__name__)

LEADERBOARD_FETCH_LIMIT = 15
LEADERBOARD_SIZE = 10
STATS_RECENT_SOLVES = 5

NOT_LINKED_HINT = "Use `/link <username>` to get started."


def to_discord_embed(message: EmbedMessage) -> discord.Embed:
    """Convert an EmbedMessage into a discord.py Embed."""
    return discord.Embed.from_dict(message.to_discord_embed_dict())


async def send_embed(
    interaction: discord.Interaction,
    message: EmbedMessage,
    ephemeral: bool = False,
) -> None:
    """Reply to an interaction, whether or not it was deferred."""
    embed = to_discord_embed(message)
    if interaction.response.is_done():
        await interaction.followup.send(embed=embed, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(embed=embed, ephemeral=ephemeral)


class LeetCodeCommands(commands.Cog):
    """Slash commands for linking accounts and viewing stats."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.service = get_tracking_service()
        self.tracking = get_tracking_repository()
        self.solves = get_solved_problem_repository()
        self.leetcode = get_leetcode_client()

    @app_commands.command(name="link", description="Link your Discord account to your LeetCode profile")
    @app_commands.describe(username="Your LeetCode username")
    @app_commands.guild_only()
    async def link(self, interaction: discord.Interaction, username: str):
        await interaction.response.defer()

        try:
            result = await self.service.link(
                str(interaction.user.id), str(interaction.guild_id), username
            )
        except UnknownLeetCodeUserError:
            message = build_error(
                f"Could not find a LeetCode user with username **{username}**.\n\n"
                "Please check the spelling and try again.",
                title="User Not Found",
            )
        except (LeetCodeAPIError, DatabaseError) as e:
            logger.error(f"/link failed for {interaction.user.id}: {e}")
            message = build_error("Failed to link your LeetCode profile. Please try again later.")
        else:
            message = build_link_confirmation(
                result.profile,
                result.previous_username,
                baseline_set=result.baseline_timestamp > 0,
            )
            logger.info(f"/link {username} by {interaction.user} in guild {interaction.guild_id}")

        await send_embed(interaction, message)

    @app_commands.command(name="untrack", description="Unlink your LeetCode account and stop tracking your stats")
    @app_commands.guild_only()
    async def untrack(self, interaction: discord.Interaction):
        try:
            username = await self.service.unlink(str(interaction.user.id), str(interaction.guild_id))
        except DatabaseError as e:
            logger.error(f"/untrack failed for {interaction.user.id}: {e}")
            await send_embed(
                interaction,
                build_error("Something went wrong while unlinking. Please try again."),
                ephemeral=True,
            )
            return

        if username is None:
            message = build_notice(
                "Not Tracked",
                f"You don't have a linked LeetCode account in this server.\n\n{NOT_LINKED_HINT}",
            )
        else:
            message = build_unlink_confirmation(username)

        await send_embed(interaction, message, ephemeral=True)

    @app_commands.command(
        name="setchannel",
        description="Set the channel for automated announcements (victory posts, recaps, streak alerts)",
    )
    @app_commands.describe(channel="The text channel to use (defaults to current channel)")
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.guild_only()
    async def setchannel(
        self,
        interaction: discord.Interaction,
        channel: Optional[discord.TextChannel] = None,
    ):
        target_id = str(channel.id if channel else interaction.channel_id)

        try:
            await self.service.set_destination(str(interaction.guild_id), target_id)
        except DatabaseError as e:
            logger.error(f"/setchannel failed in guild {interaction.guild_id}: {e}")
            await send_embed(
                interaction,
                build_error("Failed to save the log channel. Please try again."),
                ephemeral=True,
            )
            return

        await send_embed(interaction, build_channel_confirmation(target_id), ephemeral=True)

    @app_commands.command(name="stats", description="Display LeetCode stats for a user")
    @app_commands.describe(user="The Discord user to check (defaults to yourself)")
    @app_commands.guild_only()
    async def stats(self, interaction: discord.Interaction, user: Optional[discord.Member] = None):
        target = user or interaction.user
        discord_id = str(target.id)
        guild_id = str(interaction.guild_id)

        await interaction.response.defer()

        try:
            account = await self.tracking.get_account(discord_id, guild_id)
            if not account:
                if target.id == interaction.user.id:
                    description = f"You haven't linked your LeetCode account yet!\n\n{NOT_LINKED_HINT}"
                else:
                    description = f"**{target.display_name}** hasn't linked their LeetCode account yet."
                await send_embed(interaction, build_notice("Not Linked", description))
                return

            profile = await self.leetcode.fetch_profile(account.leetcode_username)
            if not profile:
                await send_embed(interaction, build_error(
                    f"The linked LeetCode account **{account.leetcode_username}** could not be found.\n\n"
                    "The account may have been deleted or renamed. Use `/link` to update.",
                    title="Profile Not Found",
                ))
                return

            recent = await self.solves.list_member_solves(discord_id, guild_id, limit=STATS_RECENT_SOLVES)
            message = build_profile_stats(
                profile,
                [(solve.problem_title, solve.problem_slug) for solve in recent],
            )
        except (LeetCodeAPIError, DatabaseError) as e:
            logger.error(f"/stats failed for {discord_id}: {e}")
            message = build_error("Failed to fetch LeetCode stats. Please try again later.")

        await send_embed(interaction, message)

    @app_commands.command(name="daily", description="Show today's LeetCode Daily Challenge")
    async def daily(self, interaction: discord.Interaction):
        await interaction.response.defer()

        try:
            problem = await self.leetcode.fetch_daily_problem()
        except LeetCodeAPIError as e:
            logger.error(f"/daily failed: {e}")
            problem = None

        if problem is None:
            message = build_error("Couldn't fetch today's daily challenge. Try again later.")
        else:
            message = build_daily_problem(problem)

        await send_embed(interaction, message)

    @app_commands.command(name="leaderboard", description="Show the top grinders in this server")
    @app_commands.guild_only()
    async def leaderboard(self, interaction: discord.Interaction):
        await interaction.response.defer()

        try:
            accounts = await self.tracking.list_guild_accounts(str(interaction.guild_id))
        except DatabaseError as e:
            logger.error(f"/leaderboard failed in guild {interaction.guild_id}: {e}")
            await send_embed(interaction, build_error("Failed to fetch leaderboard data. Please try again later."))
            return

        if not accounts:
            await send_embed(interaction, build_notice(
                "No Linked Users",
                f"No one in this server has linked their LeetCode account yet.\n\n{NOT_LINKED_HINT}",
            ))
            return

        accounts = accounts[:LEADERBOARD_FETCH_LIMIT]
        results = await asyncio.gather(
            *(self.leetcode.fetch_profile(a.leetcode_username) for a in accounts),
            return_exceptions=True,
        )

        entries = []
        for account, result in zip(accounts, results):
            if isinstance(result, Exception):
                logger.warning(f"Leaderboard fetch failed for {account.leetcode_username}: {result}")
            elif result is not None:
                entries.append((account.discord_id, result))

        if not entries:
            message = build_error("Couldn't fetch any LeetCode profiles. Please try again later.")
        else:
            message = build_leaderboard(interaction.guild.name, entries, limit=LEADERBOARD_SIZE)

        await send_embed(interaction, message)

    @app_commands.command(name="list", description="Lists all linked accounts in server")
    @app_commands.guild_only()
    async def list_linked(self, interaction: discord.Interaction):
        try:
            accounts = await self.tracking.list_guild_accounts(str(interaction.guild_id))
        except DatabaseError as e:
            logger.error(f"/list failed in guild {interaction.guild_id}: {e}")
            await send_embed(interaction, build_error("Failed to load linked accounts. Please try again later."))
            return

        message = build_linked_accounts(
            interaction.guild.name,
            [(a.discord_id, a.leetcode_username) for a in accounts],
        )
        await send_embed(interaction, message)

    @app_commands.command(name="help", description="Lists all available tracker commands")
    async def show_help(self, interaction: discord.Interaction):
        await send_embed(interaction, build_help())

    @app_commands.command(name="ping", description="Replies with Pong!")
    async def ping(self, interaction: discord.Interaction):
        await interaction.response.send_message("Pong!")


class TrackerBot(commands.Bot):
    """Discord bot serving the tracker's slash commands."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None
        )

    async def setup_hook(self):
        """Register the command cog and sync slash commands."""
        logger.info("Discord bot setup hook called")
        await self.add_cog(LeetCodeCommands(self))
        synced = await self.tree.sync()
        logger.info(f"Synced {len(synced)} slash command(s)")

    async def on_ready(self):
        """Called when bot successfully connects."""
        logger.info(f"Discord bot connected as {self.user.name} ({self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

        await self.change_presence(
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name="LeetCode grinders"
            )
        )


# Singleton instance
_bot: Optional[TrackerBot] = None


def get_discord_bot() -> Optional[TrackerBot]:
    """Get the Discord bot instance."""
    global _bot
    if _bot is None and settings.discord_bot_token:
        _bot = TrackerBot()
    return _bot


async def start_discord_bot():
    """Start the Discord bot in the background."""
    bot = get_discord_bot()
    if not bot:
        logger.warning("Discord bot token not configured, skipping bot startup")
        return

    try:
        logger.info("Starting Discord bot...")
        await bot.start(settings.discord_bot_token)
    except (discord.DiscordException, OSError) as e:
        logger.error(f"Discord bot error: {e}")


async def stop_discord_bot():
    """Stop the Discord bot gracefully."""
    global _bot
    if _bot and not _bot.is_closed():
        await _bot.close()
        logger.info("Discord bot stopped")
    _bot = None
