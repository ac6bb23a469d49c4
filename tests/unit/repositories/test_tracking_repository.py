"""
Unit tests for TrackingRepository.

Runs against a temporary SQLite database.
"""

import pytest

from leettracker.database.exceptions import AccountNotFoundError


# ============================================================
# LINK / UNLINK TESTS
# ============================================================

@pytest.mark.asyncio
async def test_link_creates_account_with_zero_watermark(tracking_repo):
    account = await tracking_repo.link_account("1", "9", "ada")

    assert account.discord_id == "1"
    assert account.guild_id == "9"
    assert account.leetcode_username == "ada"
    assert account.last_submission_timestamp == 0
    assert account.total_solved == 0
    assert account.current_streak == 0


@pytest.mark.asyncio
async def test_relink_same_username_keeps_watermark(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.update_stats("1", "9", total_solved=50, streak=4, last_seen=1000)

    account = await tracking_repo.link_account("1", "9", "ada")

    assert account.last_submission_timestamp == 1000
    assert account.total_solved == 50
    assert account.current_streak == 4


@pytest.mark.asyncio
async def test_relink_different_username_resets_watermark(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.update_stats("1", "9", total_solved=50, streak=4, last_seen=1000)

    account = await tracking_repo.link_account("1", "9", "grace")

    assert account.leetcode_username == "grace"
    assert account.last_submission_timestamp == 0
    assert account.total_solved == 0
    assert len(await tracking_repo.list_accounts()) == 1


@pytest.mark.asyncio
async def test_same_member_can_link_in_several_guilds(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.link_account("1", "10", "ada")

    accounts = await tracking_repo.list_accounts()

    assert [(a.discord_id, a.guild_id) for a in accounts] == [("1", "9"), ("1", "10")]


@pytest.mark.asyncio
async def test_unlink(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")

    assert await tracking_repo.unlink_account("1", "9") is True
    assert await tracking_repo.get_account("1", "9") is None
    assert await tracking_repo.unlink_account("1", "9") is False


@pytest.mark.asyncio
async def test_unlink_then_relink_starts_from_baseline(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.update_watermark("1", "9", 5000)
    await tracking_repo.unlink_account("1", "9")

    account = await tracking_repo.link_account("1", "9", "ada")

    assert account.last_submission_timestamp == 0


@pytest.mark.asyncio
async def test_list_guild_accounts_filters_by_guild(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.link_account("2", "9", "bob")
    await tracking_repo.link_account("3", "10", "cara")

    accounts = await tracking_repo.list_guild_accounts("9")

    assert {a.discord_id for a in accounts} == {"1", "2"}


# ============================================================
# WATERMARK TESTS
# ============================================================

@pytest.mark.asyncio
async def test_watermark_advances(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")

    assert await tracking_repo.update_watermark("1", "9", 1000) is True

    account = await tracking_repo.get_account("1", "9")
    assert account.last_submission_timestamp == 1000


@pytest.mark.asyncio
async def test_watermark_never_moves_backwards(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.update_watermark("1", "9", 2000)

    assert await tracking_repo.update_watermark("1", "9", 1500) is False
    assert await tracking_repo.update_watermark("1", "9", 2000) is False

    account = await tracking_repo.get_account("1", "9")
    assert account.last_submission_timestamp == 2000


@pytest.mark.asyncio
async def test_update_stats_last_seen_is_monotonic(tracking_repo):
    await tracking_repo.link_account("1", "9", "ada")
    await tracking_repo.update_watermark("1", "9", 2000)

    await tracking_repo.update_stats("1", "9", total_solved=10, streak=2, last_seen=1000)

    account = await tracking_repo.get_account("1", "9")
    assert account.last_submission_timestamp == 2000
    assert account.total_solved == 10
    assert account.current_streak == 2


@pytest.mark.asyncio
async def test_update_stats_missing_account_raises(tracking_repo):
    with pytest.raises(AccountNotFoundError) as exc_info:
        await tracking_repo.update_stats("404", "9", total_solved=1, streak=1)

    assert (exc_info.value.discord_id, exc_info.value.guild_id) == ("404", "9")


# ============================================================
# LOG CHANNEL TESTS
# ============================================================

@pytest.mark.asyncio
async def test_log_channel_defaults_to_none(tracking_repo):
    assert await tracking_repo.get_log_channel("9") is None


@pytest.mark.asyncio
async def test_set_log_channel_overwrites(tracking_repo):
    await tracking_repo.set_log_channel("9", "555")
    await tracking_repo.set_log_channel("9", "777")

    assert await tracking_repo.get_log_channel("9") == "777"


@pytest.mark.asyncio
async def test_list_log_channels_skips_cleared(tracking_repo):
    await tracking_repo.set_log_channel("9", "555")
    await tracking_repo.set_log_channel("10", "666")
    await tracking_repo.set_log_channel("10", None)

    assert await tracking_repo.list_log_channels() == [("9", "555")]
