"""Tests for TTLCache and RedisTTLCache."""

import json
import threading
import time
from unittest.mock import Mock

import pytest
import redis

from musicbridge.spotify.cache import (
    DEVICES_KEY,
    PLAYER_CONTEXT_KEY,
    RedisTTLCache,
    TTLCache,
    artist_key,
)


# =============================================================================
# Key namespace
# =============================================================================

class TestKeys:
    def test_fixed_keys(self):
        assert DEVICES_KEY == "devices"
        assert PLAYER_CONTEXT_KEY == "player-context"

    def test_artist_key(self):
        assert artist_key("abc") == "artist_abc"


# =============================================================================
# TTLCache
# =============================================================================

class TestTTLCache:
    """Tests for the in-process cache."""

    def test_miss_returns_none(self, cache):
        assert cache.get("missing") is None

    def test_set_then_get(self, cache):
        cache.set("devices", [{"id": "d1"}], ttl_seconds=60)
        assert cache.get("devices") == [{"id": "d1"}]

    def test_value_survives_until_expiry(self, cache, clock):
        cache.set("devices", ["d1"], ttl_seconds=60)
        clock.advance(59.9)
        assert cache.get("devices") == ["d1"]

    def test_expired_entry_is_absent(self, cache, clock):
        cache.set("player-context", {"x": 1}, ttl_seconds=15)
        clock.advance(15)
        assert cache.get("player-context") is None

    def test_expired_entry_is_evicted_on_read(self, cache, clock):
        cache.set("k", "v", ttl_seconds=1)
        clock.advance(2)
        cache.get("k")
        assert len(cache) == 0

    def test_no_ttl_never_expires(self, cache, clock):
        cache.set("k", "v")
        clock.advance(10 ** 6)
        assert cache.get("k") == "v"

    def test_non_positive_ttl_never_expires(self, cache, clock):
        cache.set("k", "v", ttl_seconds=0)
        clock.advance(10 ** 6)
        assert cache.get("k") == "v"

    def test_set_overwrites_and_resets_ttl(self, cache, clock):
        cache.set("k", "old", ttl_seconds=10)
        clock.advance(8)
        cache.set("k", "new", ttl_seconds=10)
        clock.advance(8)
        assert cache.get("k") == "new"

    def test_invalidate(self, cache):
        cache.set("k", "v", ttl_seconds=60)
        cache.invalidate("k")
        assert cache.get("k") is None

    def test_invalidate_missing_key(self, cache):
        assert cache.invalidate("never-set") is True

    def test_clear(self, cache):
        cache.set("a", 1, ttl_seconds=60)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_purge_expired(self, cache, clock):
        cache.set("short", 1, ttl_seconds=1)
        cache.set("long", 2, ttl_seconds=100)
        clock.advance(5)
        assert cache.purge_expired() == 1
        assert cache.get("long") == 2

    def test_default_clock(self):
        cache = TTLCache()
        cache.set("k", "v", ttl_seconds=60)
        assert cache.get("k") == "v"

    def test_entry_removed_during_expiry_check(self, cache, clock):
        cache.set("devices", ["d1"], ttl_seconds=1)
        clock.advance(2)

        def clock_that_invalidates():
            cache.invalidate("devices")
            return clock()

        cache._clock = clock_that_invalidates
        assert cache.get("devices") is None
        assert len(cache) == 0

    def test_concurrent_reads_of_expired_entry(self, clock):
        slow = threading.Event()

        def slow_clock():
            if slow.is_set():
                time.sleep(0.05)
            return clock()

        cache = TTLCache(clock=slow_clock)
        cache.set("devices", ["d1"], ttl_seconds=1)
        clock.advance(2)
        slow.set()

        errors = []

        def read():
            try:
                assert cache.get("devices") is None
            except Exception as e:
                errors.append(repr(e))

        threads = [threading.Thread(target=read) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert errors == []
        assert len(cache) == 0


# =============================================================================
# RedisTTLCache
# =============================================================================

@pytest.fixture
def mock_redis():
    return Mock(spec=redis.Redis)


@pytest.fixture
def redis_cache(mock_redis):
    return RedisTTLCache(mock_redis, key_prefix="test:")


class TestRedisTTLCache:
    """Tests for the Redis-backed cache."""

    def test_get_hit(self, redis_cache, mock_redis):
        mock_redis.get.return_value = json.dumps([{"id": "d1"}]).encode("utf-8")
        assert redis_cache.get("devices") == [{"id": "d1"}]
        mock_redis.get.assert_called_once_with("test:devices")

    def test_get_miss(self, redis_cache, mock_redis):
        mock_redis.get.return_value = None
        assert redis_cache.get("devices") is None

    def test_get_decoded_string(self, redis_cache, mock_redis):
        mock_redis.get.return_value = '{"id": "a1"}'
        assert redis_cache.get("artist_a1") == {"id": "a1"}

    def test_get_redis_error_is_miss(self, redis_cache, mock_redis):
        mock_redis.get.side_effect = redis.RedisError("down")
        assert redis_cache.get("devices") is None

    def test_set_with_ttl_uses_setex(self, redis_cache, mock_redis):
        assert redis_cache.set("devices", [1, 2], ttl_seconds=60) is True
        mock_redis.setex.assert_called_once_with(
            "test:devices", 60, json.dumps([1, 2]).encode("utf-8")
        )

    def test_sub_second_ttl_rounds_up(self, redis_cache, mock_redis):
        redis_cache.set("k", "v", ttl_seconds=0.5)
        args = mock_redis.setex.call_args[0]
        assert args[1] == 1

    def test_set_without_ttl_uses_set(self, redis_cache, mock_redis):
        redis_cache.set("k", "v")
        mock_redis.set.assert_called_once_with("test:k", b'"v"')
        mock_redis.setex.assert_not_called()

    def test_set_redis_error_returns_false(self, redis_cache, mock_redis):
        mock_redis.setex.side_effect = redis.RedisError("down")
        assert redis_cache.set("k", "v", ttl_seconds=10) is False

    def test_invalidate(self, redis_cache, mock_redis):
        assert redis_cache.invalidate("player-context") is True
        mock_redis.delete.assert_called_once_with("test:player-context")

    def test_invalidate_redis_error(self, redis_cache, mock_redis):
        mock_redis.delete.side_effect = redis.RedisError("down")
        assert redis_cache.invalidate("k") is False

    def test_clear_scans_prefix(self, redis_cache, mock_redis):
        mock_redis.scan.side_effect = [
            (5, [b"test:a", b"test:b"]),
            (0, [b"test:c"]),
        ]
        assert redis_cache.clear() is True
        assert mock_redis.delete.call_count == 2
        mock_redis.scan.assert_any_call(0, match="test:*", count=100)
