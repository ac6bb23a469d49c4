"""
Discord embed payloads.

EmbedMessage is the single message type pushed through the notification
sink. The builder functions below produce the automated announcements
(solve, daily recap, streak alert) and the slash command replies.
"""

from datetime import datetime
from typing import Optional, List, Sequence, Tuple, Dict, Any

import pytz
from pydantic import BaseModel, Field

from .leetcode import Difficulty, Submission, LeetCodeProfile, DailyProblem

LEETCODE_LOGO_URL = "https://leetcode.com/static/images/LeetCode_logo.png"

# Embed colors
LEETCODE_ORANGE = 0xFFA116
GOLD = 0xFFD700
ALERT_ORANGE = 0xFF6B35
SUCCESS_GREEN = 0x00FF00
WARNING_ORANGE = 0xFFA500
ERROR_RED = 0xFF0000
SAGE_GREEN = 0xB2C197

DIFFICULTY_COLORS = {
    Difficulty.EASY: 0x00B8A3,
    Difficulty.MEDIUM: 0xFFC01E,
    Difficulty.HARD: 0xFF375F,
}

DIFFICULTY_EMOJIS = {
    Difficulty.EASY: "🌱",
    Difficulty.MEDIUM: "🌲",
    Difficulty.HARD: "⛰️",
}

MEDALS = ("🥇", "🥈", "🥉")


class EmbedField(BaseModel):
    """A single name/value field of an embed."""
    name: str
    value: str
    inline: bool = False


class EmbedMessage(BaseModel):
    """A Discord rich embed."""
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    color: int = LEETCODE_ORANGE
    thumbnail_url: Optional[str] = None
    footer: Optional[str] = None
    timestamp: Optional[datetime] = Field(default_factory=lambda: datetime.now(pytz.UTC))
    fields: List[EmbedField] = Field(default_factory=list)

    def add_field(self, name: str, value: str, inline: bool = False) -> "EmbedMessage":
        self.fields.append(EmbedField(name=name, value=value[:1024], inline=inline))
        return self

    def to_discord_embed_dict(self) -> Dict[str, Any]:
        """Convert to the Discord embed JSON format."""
        embed: Dict[str, Any] = {"color": self.color}

        if self.title:
            embed["title"] = self.title[:256]
        if self.description:
            embed["description"] = self.description[:4096]  # Discord limit
        if self.url:
            embed["url"] = self.url
        if self.thumbnail_url:
            embed["thumbnail"] = {"url": self.thumbnail_url}
        if self.footer:
            embed["footer"] = {"text": self.footer}
        if self.timestamp:
            embed["timestamp"] = self.timestamp.isoformat()
        if self.fields:
            embed["fields"] = [field.model_dump() for field in self.fields]

        return embed


def medal_for(index: int) -> str:
    """Rank marker for a zero-based leaderboard position."""
    if 0 <= index < len(MEDALS):
        return MEDALS[index]
    return f"**{index + 1}.**"


def difficulty_color(difficulty: Difficulty) -> int:
    return DIFFICULTY_COLORS.get(difficulty, LEETCODE_ORANGE)


def build_solve_announcement(
    discord_id: str,
    submission: Submission,
    difficulty: Difficulty,
    profile: Optional[LeetCodeProfile] = None,
) -> EmbedMessage:
    """Announcement for a newly detected accepted solve."""
    difficulty_tag = ""
    if difficulty != Difficulty.UNKNOWN:
        difficulty_tag = f" a **{difficulty.value}** problem:"

    total_line = f"\nTotal Solved: **{profile.stats.total}**" if profile else ""

    return EmbedMessage(
        description=(
            f"🔥 <@{discord_id}> just crushed{difficulty_tag} "
            f"**[{submission.title}]({submission.url})**!{total_line}"
        ),
        color=difficulty_color(difficulty),
        thumbnail_url=(profile.avatar_url if profile else None) or LEETCODE_LOGO_URL,
        footer=f"Language: {submission.lang}",
    )


def build_daily_recap(top_solvers: List[Tuple[str, int]]) -> EmbedMessage:
    """Yesterday's top grinders, highest count first."""
    lines = []
    for i, (discord_id, count) in enumerate(top_solvers):
        plural = "s" if count > 1 else ""
        lines.append(f"{medal_for(i)} <@{discord_id}> — **{count}** problem{plural} solved")

    return EmbedMessage(
        title="📊 Top Grinders of Yesterday",
        description="\n".join(lines),
        color=GOLD,
        footer="Keep grinding! 💪",
    )


def build_streak_alert(at_risk: List[Tuple[str, int]]) -> EmbedMessage:
    """Combined warning for members whose streak ends tonight."""
    lines = [
        f"⚠️ <@{discord_id}> — **{streak}-day streak** at risk!"
        for discord_id, streak in at_risk
    ]
    return EmbedMessage(
        title="🔔 Streak Protection Alert",
        description="\n".join(lines) + "\n\nSolve a problem today to keep your streak alive!",
        color=ALERT_ORANGE,
    )


# ==================== COMMAND REPLIES ====================


def build_error(description: str, title: str = "Error") -> EmbedMessage:
    return EmbedMessage(title=title, description=description, color=ERROR_RED)


def build_notice(title: str, description: str) -> EmbedMessage:
    return EmbedMessage(title=title, description=description, color=WARNING_ORANGE)


def build_link_confirmation(
    profile: LeetCodeProfile,
    previous_username: Optional[str] = None,
    baseline_set: bool = False,
) -> EmbedMessage:
    ranking = f"#{profile.ranking:,}" if profile.ranking else "Unranked"
    embed = EmbedMessage(
        title="LeetCode Profile Linked!",
        description=(
            "Solves submitted from now on will be announced in the log channel."
            if baseline_set else None
        ),
        color=SUCCESS_GREEN,
        thumbnail_url=profile.avatar_url or LEETCODE_LOGO_URL,
        footer=f"Updated from: {previous_username}" if previous_username else None,
    )
    embed.add_field("LeetCode Username", profile.username, inline=True)
    embed.add_field("Global Ranking", ranking, inline=True)
    embed.add_field("Problems Solved", str(profile.stats.total), inline=True)
    return embed


def build_unlink_confirmation(username: str) -> EmbedMessage:
    return EmbedMessage(
        title="Successfully Untracked",
        description=(
            f"Your LeetCode account (**{username}**) has been unlinked.\n\n"
            "Your stats will no longer be monitored in this server.\n"
            "Use `/link <username>` anytime to reconnect."
        ),
        color=SUCCESS_GREEN,
    )


def build_channel_confirmation(channel_id: str) -> EmbedMessage:
    return EmbedMessage(
        title="📢 Log Channel Set",
        description=(
            f"Automated announcements will now be posted in <#{channel_id}>.\n\n"
            "This includes:\n"
            "• 🔥 Victory announcements (new problem solves)\n"
            "• 📊 Daily recap (yesterday's top grinders)\n"
            "• 🔔 Streak protection alerts"
        ),
        color=SUCCESS_GREEN,
    )


def build_profile_stats(
    profile: LeetCodeProfile,
    recent_solves: Sequence[Tuple[str, str]] = (),
) -> EmbedMessage:
    """
    Stats card for /stats.

    recent_solves holds (title, slug) pairs from the announcement ledger,
    newest first.
    """
    stats = profile.stats
    embed = EmbedMessage(
        title=f"{profile.username}'s LeetCode Stats",
        url=profile.profile_url,
        color=LEETCODE_ORANGE,
        thumbnail_url=profile.avatar_url or LEETCODE_LOGO_URL,
        footer="LeetCode Tracker",
    )
    embed.add_field(
        "📊 Problems Solved",
        "\n".join([
            f"**Total:** {stats.total}",
            f"🟢 Easy: {stats.easy}",
            f"🟡 Medium: {stats.medium}",
            f"🔴 Hard: {stats.hard}",
        ]),
        inline=True,
    )
    embed.add_field(
        "🏆 Ranking",
        f"#{profile.ranking:,}" if profile.ranking else "Unranked",
        inline=True,
    )
    embed.add_field("🔥 Streak", f"{profile.streak} days", inline=True)
    if recent_solves:
        embed.add_field(
            "🕑 Recent Solves",
            "\n".join(
                f"[{title}](https://leetcode.com/problems/{slug}/)"
                for title, slug in recent_solves
            ),
        )
    return embed


def build_daily_problem(problem: DailyProblem) -> EmbedMessage:
    embed = EmbedMessage(
        title=f"📅 Daily Challenge — {problem.date}",
        color=difficulty_color(problem.difficulty),
        footer="Good luck! 🍀",
    )
    embed.add_field("Problem", f"**[{problem.title}]({problem.link})**")
    embed.add_field(
        "Difficulty",
        f"{DIFFICULTY_EMOJIS.get(problem.difficulty, '❓')} {problem.difficulty.value}",
        inline=True,
    )
    embed.add_field("Acceptance Rate", f"{problem.acceptance_rate:.1f}%", inline=True)
    if problem.tags:
        embed.add_field("Topics", ", ".join(f"`{tag}`" for tag in problem.tags))
    return embed


def build_leaderboard(
    guild_name: str,
    entries: List[Tuple[str, LeetCodeProfile]],
    limit: int = 10,
) -> EmbedMessage:
    """Live leaderboard, sorted by total solved."""
    ranked = sorted(entries, key=lambda entry: entry[1].stats.total, reverse=True)

    lines = []
    for i, (discord_id, profile) in enumerate(ranked[:limit]):
        stats = profile.stats
        streak_badge = f" 🔥{profile.streak}d" if profile.streak > 0 else ""
        lines.append(
            f"{medal_for(i)} <@{discord_id}> — **{stats.total}** solved "
            f"({stats.easy}E / {stats.medium}M / {stats.hard}H){streak_badge}"
        )

    plural = "" if len(ranked) == 1 else "s"
    return EmbedMessage(
        title=f"🏆 {guild_name} — LeetCode Leaderboard",
        description="\n".join(lines),
        color=GOLD,
        footer=f"{len(ranked)} tracked member{plural} • Stats fetched live",
    )


# Discord rejects embeds with more than 25 fields
MAX_EMBED_FIELDS = 25


def build_linked_accounts(guild_name: str, accounts: Sequence[Tuple[str, str]]) -> EmbedMessage:
    """Roster for /list. accounts holds (discord_id, leetcode_username) pairs."""
    plural = "" if len(accounts) == 1 else "s"
    embed = EmbedMessage(
        title=f"Linked Accounts - {guild_name}",
        description=f"{len(accounts)} account{plural} linked",
        color=SAGE_GREEN,
    )

    if not accounts:
        embed.add_field("No linked accounts", "Use `/link <username>` to connect your LeetCode profile!")
        return embed

    for discord_id, username in accounts[:MAX_EMBED_FIELDS]:
        embed.add_field(f"LeetCode: {username}", f"<@{discord_id}>", inline=True)

    hidden = len(accounts) - MAX_EMBED_FIELDS
    if hidden > 0:
        embed.footer = f"...and {hidden} more"
    return embed


def build_help() -> EmbedMessage:
    embed = EmbedMessage(title="Commands List", color=SAGE_GREEN)
    embed.add_field(
        "Account",
        "`/link <username>` — Connect your LeetCode profile\n"
        "`/untrack` — Unlink your account & stop tracking",
    )
    embed.add_field(
        "Stats",
        "`/stats [@user]` — View LeetCode stats (yours or another member)\n"
        "`/leaderboard` — Server rankings by problems solved\n"
        "`/list` — Everyone linked in this server",
    )
    embed.add_field("Community", "`/daily` — Today's LeetCode Daily Challenge")
    embed.add_field("Server Setup", "`/setchannel` — Set the channel for automated announcements")
    return embed
