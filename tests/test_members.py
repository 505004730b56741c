"""
Transcript Forge - Participant Collector Tests
==============================================

Tests for presence ordering and best-effort participant lookup.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from conftest import FakeChannel, make_guild
from transcript_forge.services.transcript.members import (
    Participant,
    collect_participants,
    normalize_status,
    sort_participants,
)
from transcript_forge.services.transcript.models import TranscriptAuthor, TranscriptMessage
from transcript_forge.utils import discord_errors


def member(member_id, name, status=discord.Status.online, colour=0, bot=False):
    return SimpleNamespace(
        id=member_id,
        name=name.lower(),
        display_name=name,
        display_avatar=SimpleNamespace(url=f"https://cdn.discordapp.com/avatars/{member_id}/m.png"),
        status=status,
        color=discord.Colour(colour),
        bot=bot,
    )


def authored(*authors):
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        TranscriptMessage(
            id=str(i),
            content="",
            author=TranscriptAuthor(id=author_id, username=name, avatar_url="https://x/a.png"),
            timestamp=when,
        )
        for i, (author_id, name) in enumerate(authors)
    ]


# =============================================================================
# Presence
# =============================================================================

class TestPresence:
    """Tests for status normalization and ordering."""

    def test_normalize_known(self):
        """Test discord.Status values and raw strings map through."""
        assert normalize_status(discord.Status.idle) == "idle"
        assert normalize_status("dnd") == "dnd"

    def test_normalize_unknown_is_offline(self):
        """Test invisible, missing and odd values count as offline."""
        assert normalize_status(discord.Status.invisible) == "offline"
        assert normalize_status(None) == "offline"
        assert normalize_status("streaming") == "offline"

    def test_sort_by_status_then_name(self):
        """Test online before idle before dnd before offline, then by name."""
        people = [
            Participant(id="1", name="zed", status="offline"),
            Participant(id="2", name="Bea", status="idle"),
            Participant(id="3", name="amy", status="idle"),
            Participant(id="4", name="Cal", status="online"),
            Participant(id="5", name="dan", status="dnd"),
        ]

        assert [p.name for p in sort_participants(people)] == ["Cal", "amy", "Bea", "dan", "zed"]

    def test_from_member_colour(self):
        """Test role colour becomes hex and uncoloured members keep the default."""
        assert Participant.from_member(member(1, "Red", colour=0xFF0000)).color == "#ff0000"
        assert Participant.from_member(member(2, "Plain")).color == "#DCDDDE"


# =============================================================================
# Collection
# =============================================================================

class TestCollectFromAuthors:
    """Tests for the message-author path."""

    @pytest.mark.asyncio
    async def test_cached_member_used(self):
        """Test members in the guild cache supply status and display name."""
        guild = make_guild(members={1: member(1, "Alice", discord.Status.dnd)})
        channel = FakeChannel(guild=guild)

        participants = await collect_participants(channel, authored(("1", "alice")))

        assert participants[0].name == "Alice"
        assert participants[0].status == "dnd"
        guild.fetch_member.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetched_member_used(self):
        """Test members missing from cache are fetched."""
        guild = make_guild()
        guild.fetch_member = AsyncMock(return_value=member(2, "Bob", discord.Status.idle))

        participants = await collect_participants(FakeChannel(guild=guild), authored(("2", "bob")))

        assert participants[0].name == "Bob"
        guild.fetch_member.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_departed_member_falls_back_to_author(self):
        """Test a member that left still appears, offline, from author data."""
        guild = make_guild()
        guild.fetch_member = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404), "Unknown Member"))

        participants = await collect_participants(FakeChannel(guild=guild), authored(("3", "ghost")))

        assert len(participants) == 1
        assert participants[0].name == "ghost"
        assert participants[0].status == "offline"

    @pytest.mark.asyncio
    async def test_forbidden_lookup_falls_back_with_warning(self, monkeypatch):
        """Test a 403 member fetch keeps the author and only warns."""
        log = MagicMock()
        monkeypatch.setattr(discord_errors, "logger", log)
        guild = make_guild()
        guild.fetch_member = AsyncMock(
            side_effect=discord.HTTPException(MagicMock(status=403), "Missing Access"),
        )

        participants = await collect_participants(FakeChannel(guild=guild), authored(("6", "frank")))

        assert [(p.id, p.name, p.status) for p in participants] == [("6", "frank", "offline")]
        log.warning.assert_called_once()
        assert log.warning.call_args[0][0] == "🚫 Participant Fetch Forbidden"
        log.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_any_lookup_failure_falls_back(self):
        """Test unexpected lookup errors don't drop the participant."""
        guild = make_guild()  # fetch_member raises RuntimeError

        participants = await collect_participants(FakeChannel(guild=guild), authored(("4", "dave")))

        assert [p.id for p in participants] == ["4"]

    @pytest.mark.asyncio
    async def test_distinct_authors(self):
        """Test repeated authors appear once."""
        participants = await collect_participants(
            FakeChannel(), authored(("1", "a"), ("1", "a"), ("2", "b")),
        )
        assert sorted(p.id for p in participants) == ["1", "2"]


class TestCollectFromThread:
    """Tests for the thread member path."""

    @pytest.mark.asyncio
    async def test_thread_members_listed(self):
        """Test thread members are used, including ones who never posted."""
        guild = make_guild(members={1: member(1, "Alice")})
        thread = FakeChannel(guild=guild, channel_type=discord.ChannelType.private_thread)
        thread.fetch_members = AsyncMock(return_value=[
            SimpleNamespace(id=1), SimpleNamespace(id=2), SimpleNamespace(id=77),
        ])

        participants = await collect_participants(thread, authored(("2", "bob")))

        assert {p.name for p in participants} == {"Alice", "bob", "User 77"}
        assert participants[0].name == "Alice"  # online sorts first

    @pytest.mark.asyncio
    async def test_thread_fetch_failure_uses_authors(self):
        """Test a failed thread member fetch falls back to message authors."""
        thread = FakeChannel(channel_type=discord.ChannelType.public_thread)
        thread.fetch_members = AsyncMock(side_effect=RuntimeError("missing access"))

        participants = await collect_participants(thread, authored(("5", "eve")))

        assert [p.name for p in participants] == ["eve"]
