"""Tests for the identifier -> accountId TTL cache."""

from jira_mcp.users import UserCache
from jira_mcp.users.cache import USER_CACHE_TTL_SECONDS


class TestUserCache:
    """Test UserCache class."""

    def test_ttl_is_one_hour(self):
        assert USER_CACHE_TTL_SECONDS == 3600
        assert UserCache().ttl_seconds == 3600

    def test_get_missing_returns_none(self, clock):
        cache = UserCache(clock=clock)
        assert cache.get("nobody@example.com") is None

    def test_set_then_get(self, clock):
        cache = UserCache(clock=clock)
        cache.set("john@example.com", "557058:john")

        assert cache.get("john@example.com") == "557058:john"

    def test_keys_are_case_insensitive(self, clock):
        cache = UserCache(clock=clock)
        cache.set("John@Example.com", "557058:john")

        assert cache.get("john@example.com") == "557058:john"
        assert cache.get("JOHN@EXAMPLE.COM") == "557058:john"
        assert len(cache) == 1

    def test_entry_valid_just_before_ttl(self, clock):
        cache = UserCache(clock=clock)
        cache.set("john", "557058:john")

        clock.advance(USER_CACHE_TTL_SECONDS - 0.001)
        assert cache.get("john") == "557058:john"

    def test_entry_expires_at_ttl_and_is_purged(self, clock):
        cache = UserCache(clock=clock)
        cache.set("john", "557058:john")

        clock.advance(USER_CACHE_TTL_SECONDS)
        assert len(cache) == 1  # still stored until read
        assert cache.get("john") is None
        assert len(cache) == 0

    def test_set_overwrites_and_refreshes_timestamp(self, clock):
        cache = UserCache(clock=clock)
        cache.set("john", "557058:old")
        clock.advance(USER_CACHE_TTL_SECONDS - 10)

        cache.set("john", "557058:new")
        clock.advance(20)

        assert cache.get("john") == "557058:new"

    def test_clear_removes_everything(self, clock):
        cache = UserCache(clock=clock)
        cache.set("a@example.com", "557058:a")
        cache.set("b@example.com", "557058:b")

        cache.clear()

        assert len(cache) == 0
        assert cache.get("a@example.com") is None
