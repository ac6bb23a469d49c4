"""
Unit tests for the slash command cog.

Command callbacks are invoked directly with a mocked interaction.
"""

import pytest
import discord
from unittest.mock import AsyncMock, Mock

from leettracker.integrations.discord_bot import LeetCodeCommands, to_discord_embed, send_embed
from leettracker.integrations.leetcode import LeetCodeAPIError
from leettracker.models.messages import EmbedMessage
from leettracker.services.tracking import LinkResult, UnknownLeetCodeUserError


@pytest.fixture
def interaction():
    itx = Mock()
    itx.user = Mock(id=1, display_name="Ada")
    itx.guild_id = 9
    itx.channel_id = 555
    itx.guild = Mock()
    itx.guild.name = "Grinders"
    itx.response.defer = AsyncMock()
    itx.response.send_message = AsyncMock()
    itx.response.is_done = Mock(return_value=True)
    itx.followup.send = AsyncMock()
    return itx


@pytest.fixture
def cog(mock_leetcode):
    commands_cog = LeetCodeCommands(bot=Mock())
    commands_cog.service = AsyncMock()
    commands_cog.tracking = AsyncMock()
    commands_cog.solves = AsyncMock()
    commands_cog.leetcode = mock_leetcode
    return commands_cog


def sent_embed(interaction) -> discord.Embed:
    return interaction.followup.send.call_args.kwargs["embed"]


def test_to_discord_embed():
    embed = to_discord_embed(EmbedMessage(title="Hi", description="There", color=0xFFD700, footer="f"))

    assert isinstance(embed, discord.Embed)
    assert embed.title == "Hi"
    assert embed.description == "There"
    assert embed.colour.value == 0xFFD700
    assert embed.footer.text == "f"


@pytest.mark.asyncio
async def test_send_embed_uses_initial_response_when_not_deferred(interaction):
    interaction.response.is_done.return_value = False

    await send_embed(interaction, EmbedMessage(title="Hi"), ephemeral=True)

    interaction.response.send_message.assert_awaited_once()
    assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True
    interaction.followup.send.assert_not_called()


@pytest.mark.asyncio
async def test_link_success(cog, interaction, make_profile):
    cog.service.link.return_value = LinkResult(profile=make_profile("ada", total=42))

    await cog.link.callback(cog, interaction, "ada")

    interaction.response.defer.assert_awaited_once()
    cog.service.link.assert_awaited_once_with("1", "9", "ada")
    assert sent_embed(interaction).title == "LeetCode Profile Linked!"


@pytest.mark.asyncio
async def test_link_unknown_user(cog, interaction):
    cog.service.link.side_effect = UnknownLeetCodeUserError("nobody")

    await cog.link.callback(cog, interaction, "nobody")

    embed = sent_embed(interaction)
    assert embed.title == "User Not Found"
    assert "nobody" in embed.description


@pytest.mark.asyncio
async def test_link_api_failure(cog, interaction):
    cog.service.link.side_effect = LeetCodeAPIError("down")

    await cog.link.callback(cog, interaction, "ada")

    assert sent_embed(interaction).title == "Error"


@pytest.mark.asyncio
async def test_untrack_not_tracked(cog, interaction):
    interaction.response.is_done.return_value = False
    cog.service.unlink.return_value = None

    await cog.untrack.callback(cog, interaction)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "Not Tracked"


@pytest.mark.asyncio
async def test_setchannel_defaults_to_current_channel(cog, interaction):
    interaction.response.is_done.return_value = False

    await cog.setchannel.callback(cog, interaction, None)

    cog.service.set_destination.assert_awaited_once_with("9", "555")
    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert "<#555>" in embed.description


@pytest.mark.asyncio
async def test_stats_for_unlinked_member(cog, interaction):
    cog.tracking.get_account.return_value = None

    await cog.stats.callback(cog, interaction, None)

    assert sent_embed(interaction).title == "Not Linked"
    cog.leetcode.fetch_profile.assert_not_called()


@pytest.mark.asyncio
async def test_stats_shows_profile(cog, interaction, make_profile):
    cog.tracking.get_account.return_value = Mock(leetcode_username="ada")
    cog.leetcode.fetch_profile.return_value = make_profile("ada", total=42)
    cog.solves.list_member_solves.return_value = [Mock(problem_title="Two Sum", problem_slug="two-sum")]

    await cog.stats.callback(cog, interaction, None)

    embed = sent_embed(interaction)
    assert embed.title == "ada's LeetCode Stats"
    assert any("two-sum" in field.value for field in embed.fields)


@pytest.mark.asyncio
async def test_daily_failure(cog, interaction):
    cog.leetcode.fetch_daily_problem.side_effect = LeetCodeAPIError("down")

    await cog.daily.callback(cog, interaction)

    assert sent_embed(interaction).title == "Error"


@pytest.mark.asyncio
async def test_leaderboard_skips_failed_profiles(cog, interaction, make_profile):
    cog.tracking.list_guild_accounts.return_value = [
        Mock(discord_id="1", leetcode_username="ada"),
        Mock(discord_id="2", leetcode_username="bob"),
        Mock(discord_id="3", leetcode_username="cara"),
    ]

    async def fetch(username):
        if username == "bob":
            raise LeetCodeAPIError("timeout")
        return make_profile(username, total=10 if username == "ada" else 20)

    cog.leetcode.fetch_profile.side_effect = fetch

    await cog.leaderboard.callback(cog, interaction)

    embed = sent_embed(interaction)
    lines = embed.description.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("🥇 <@3>")
    assert lines[1].startswith("🥈 <@1>")


@pytest.mark.asyncio
async def test_leaderboard_empty_guild(cog, interaction):
    cog.tracking.list_guild_accounts.return_value = []

    await cog.leaderboard.callback(cog, interaction)

    assert sent_embed(interaction).title == "No Linked Users"


@pytest.mark.asyncio
async def test_link_confirmation_notes_seeded_baseline(cog, interaction, make_profile):
    cog.service.link.return_value = LinkResult(profile=make_profile("ada"), baseline_timestamp=1700)

    await cog.link.callback(cog, interaction, "ada")

    assert "from now on" in sent_embed(interaction).description


@pytest.mark.asyncio
async def test_list_shows_linked_accounts(cog, interaction):
    interaction.response.is_done.return_value = False
    cog.tracking.list_guild_accounts.return_value = [
        Mock(discord_id="1", leetcode_username="ada"),
        Mock(discord_id="2", leetcode_username="bob"),
    ]

    await cog.list_linked.callback(cog, interaction)

    cog.tracking.list_guild_accounts.assert_awaited_once_with("9")
    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.title == "Linked Accounts - Grinders"
    assert embed.description == "2 accounts linked"
    assert [(f.name, f.value) for f in embed.fields] == [
        ("LeetCode: ada", "<@1>"),
        ("LeetCode: bob", "<@2>"),
    ]


@pytest.mark.asyncio
async def test_list_empty_guild(cog, interaction):
    interaction.response.is_done.return_value = False
    cog.tracking.list_guild_accounts.return_value = []

    await cog.list_linked.callback(cog, interaction)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    assert embed.description == "0 accounts linked"
    assert embed.fields[0].name == "No linked accounts"


@pytest.mark.asyncio
async def test_help_lists_commands(cog, interaction):
    interaction.response.is_done.return_value = False

    await cog.show_help.callback(cog, interaction)

    embed = interaction.response.send_message.call_args.kwargs["embed"]
    text = "\n".join(f.value for f in embed.fields)
    for command in ("/link", "/untrack", "/stats", "/leaderboard", "/list", "/daily", "/setchannel"):
        assert f"`{command}" in text


@pytest.mark.asyncio
async def test_ping(cog, interaction):
    await cog.ping.callback(cog, interaction)

    interaction.response.send_message.assert_awaited_once_with("Pong!")
