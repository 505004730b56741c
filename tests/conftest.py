"""
Transcript Forge - Test Fixtures
================================

Shared fixtures for all tests.

Messages, users and channels are plain fakes shaped like the discord.py
objects the pipeline reads; the guild is a MagicMock so lookups can be
counted.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep test runs out of the real log directory
os.environ["TRANSCRIPT_LOG_DIR"] = tempfile.mkdtemp(prefix="transcript-logs-")
os.environ.pop("TRANSCRIPT_TIMEZONE", None)
os.environ.pop("TRANSCRIPT_ERROR_WEBHOOK", None)

import discord  # noqa: E402

from transcript_forge.core.config import TranscriptConfig, reset_config  # noqa: E402
from transcript_forge.services.transcript.resolver import EntityResolver, MentionCache  # noqa: E402


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Factories
# =============================================================================

def make_user(user_id=1001, name="alice", display_name=None, bot=False, avatar=None):
    """Fake discord.User / Member author."""
    return SimpleNamespace(
        id=user_id,
        name=name,
        display_name=display_name or name,
        discriminator="0",
        display_avatar=SimpleNamespace(
            url=avatar or f"https://cdn.discordapp.com/avatars/{user_id}/a.png"
        ),
        bot=bot,
    )


def make_message(
    message_id,
    content="",
    author=None,
    created_at=None,
    embeds=None,
    attachments=None,
    reactions=None,
    components=None,
    edited_at=None,
    **extra,
):
    """Fake discord.Message with the attributes the converter reads."""
    message = SimpleNamespace(
        id=message_id,
        content=content,
        author=author or make_user(),
        created_at=created_at or BASE_TIME + timedelta(minutes=message_id),
        embeds=embeds or [],
        attachments=attachments or [],
        reactions=reactions or [],
        components=components or [],
        edited_at=edited_at,
        mention_everyone=False,
        raw_mentions=[],
        raw_role_mentions=[],
        raw_channel_mentions=[],
        reference=None,
        type=discord.MessageType.default,
        flags=None,
    )
    for key, value in extra.items():
        setattr(message, key, value)
    return message


def make_attachment(attachment_id=1, filename="file.txt", size=1024, content_type=None):
    return SimpleNamespace(
        id=attachment_id,
        filename=filename,
        size=size,
        url=f"https://cdn.discordapp.com/attachments/1/{attachment_id}/{filename}",
        proxy_url=f"https://media.discordapp.net/attachments/1/{attachment_id}/{filename}",
        content_type=content_type,
        width=None,
        height=None,
    )


def make_guild(members=None, channels=None, roles=None):
    """MagicMock guild whose cache accessors read from the given dicts."""
    members = {} if members is None else members
    channels = {} if channels is None else channels
    roles = {} if roles is None else roles

    guild = MagicMock(spec=discord.Guild)
    guild.id = 9000
    guild.name = "Test Server"
    guild.icon = None
    guild.get_member = MagicMock(side_effect=lambda i: members.get(i))
    guild.get_channel_or_thread = MagicMock(side_effect=lambda i: channels.get(i))
    guild.get_role = MagicMock(side_effect=lambda i: roles.get(i))
    guild.fetch_member = AsyncMock(side_effect=RuntimeError("member fetch unavailable"))
    return guild


class FakeChannel:
    """
    Channel with an in-memory history.

    history() pages newest-first honouring limit/before/after like
    discord.py, and records every call. Set fail_at_batch to make that
    call (and every later one) raise `error`.
    """

    def __init__(
        self,
        messages=(),
        guild=None,
        channel_type=discord.ChannelType.text,
        name="ticket-0001",
        channel_id=5000,
        topic=None,
        fail_at_batch=None,
        error=None,
    ):
        self.messages = sorted(messages, key=lambda m: m.id)
        self.guild = guild if guild is not None else make_guild()
        self.type = channel_type
        self.name = name
        self.id = channel_id
        self.topic = topic
        self.fail_at_batch = fail_at_batch
        self.error = error or RuntimeError("history unavailable")
        self.history_calls = []

    def history(self, limit=100, before=None, after=None, oldest_first=None):
        self.history_calls.append({
            "limit": limit,
            "before": before.id if before is not None else None,
            "after": after.id if after is not None else None,
            "oldest_first": oldest_first,
        })
        return self._iterate(len(self.history_calls), limit, before, after)

    async def _iterate(self, call_number, limit, before, after):
        if self.fail_at_batch is not None and call_number >= self.fail_at_batch:
            raise self.error
        pool = [
            m for m in self.messages
            if (before is None or m.id < before.id) and (after is None or m.id > after.id)
        ]
        pool.sort(key=lambda m: m.id, reverse=True)
        for message in pool[:limit]:
            yield message


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def fresh_config():
    """Reload configuration from the environment for every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    return TranscriptConfig()


@pytest.fixture
def cache():
    return MentionCache()


@pytest.fixture
def resolver(cache):
    return EntityResolver(cache)


@pytest.fixture
def guild():
    return make_guild()


@pytest.fixture
def channel(guild):
    messages = [
        make_message(1, "hello **there**", make_user(1001, "alice")),
        make_message(2, "second", make_user(1001, "alice")),
        make_message(3, "reply from bob", make_user(1002, "bob")),
    ]
    return FakeChannel(messages, guild=guild)
