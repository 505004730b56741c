"""
Transcript Forge - Entity Resolver Tests
========================================

Tests for cache-first mention name lookups.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

from conftest import FakeChannel, make_guild
from transcript_forge.services.transcript.resolver import (
    EntityResolver,
    MentionCache,
    mention_cache,
)


class TestMentionCache:
    """Tests for the MentionCache container."""

    def test_starts_empty(self):
        """Test a new cache holds nothing."""
        assert len(MentionCache()) == 0

    def test_clear(self):
        """Test clear() empties every map."""
        cache = MentionCache(users={"1": "a"}, channels={"2": "b"}, roles={"3": "c"})
        assert len(cache) == 3
        cache.clear()
        assert len(cache) == 0

    def test_default_resolver_uses_shared_cache(self):
        """Test resolvers without a cache share the process-wide one."""
        assert EntityResolver().cache is mention_cache


class TestResolveUser:
    """Tests for user name resolution."""

    def test_second_lookup_hits_cache(self, cache):
        """Test resolving the same id twice does one directory lookup."""
        guild = make_guild(members={1001: SimpleNamespace(display_name="Alice", name="alice")})
        resolver = EntityResolver(cache)

        first = resolver.resolve_user("1001", guild)
        second = resolver.resolve_user("1001", guild)

        assert first == second == "Alice"
        assert guild.get_member.call_count == 1
        assert cache.users == {"1001": "Alice"}

    def test_accepts_channel_context(self, cache):
        """Test a channel is accepted in place of its guild."""
        guild = make_guild(members={7: SimpleNamespace(display_name="Bob", name="bob")})
        channel = FakeChannel(guild=guild)

        assert EntityResolver(cache).resolve_user("7", channel) == "Bob"

    def test_not_found_is_not_cached(self, cache):
        """Test a miss returns None and is retried on the next call."""
        members = {}
        guild = make_guild(members=members)
        resolver = EntityResolver(cache)

        assert resolver.resolve_user("55", guild) is None
        assert "55" not in cache.users

        members[55] = SimpleNamespace(display_name="Late Joiner", name="late")
        assert resolver.resolve_user("55", guild) == "Late Joiner"
        assert guild.get_member.call_count == 2

    def test_lookup_exception_returns_none(self, cache):
        """Test a throwing accessor is treated as not found."""
        guild = make_guild()
        guild.get_member = MagicMock(side_effect=RuntimeError("cache not ready"))

        assert EntityResolver(cache).resolve_user("1", guild) is None
        assert cache.users == {}

    def test_no_context(self, cache):
        """Test resolution without a context only consults the cache."""
        cache.users["9"] = "Cached"
        resolver = EntityResolver(cache)

        assert resolver.resolve_user("9") == "Cached"
        assert resolver.resolve_user("10") is None


class TestResolveChannelAndRole:
    """Tests for channel and role resolution."""

    def test_channel_name(self, cache):
        """Test channels resolve through get_channel_or_thread."""
        guild = make_guild(channels={300: SimpleNamespace(name="general")})
        resolver = EntityResolver(cache)

        assert resolver.resolve_channel("300", guild) == "general"
        assert resolver.resolve_channel("300", guild) == "general"
        assert guild.get_channel_or_thread.call_count == 1

    def test_role_name(self, cache):
        """Test roles resolve through get_role and are cached separately."""
        guild = make_guild(roles={400: SimpleNamespace(name="Moderator")})
        resolver = EntityResolver(cache)

        assert resolver.resolve_role("400", guild) == "Moderator"
        assert cache.roles == {"400": "Moderator"}
        assert cache.users == {}
