"""
Time-bounded caching for Spotify reads.

Two interchangeable backends share one interface (``get``/``set``/
``invalidate``/``clear``): ``TTLCache`` keeps entries in process memory and
``RedisTTLCache`` stores them in Redis. Values must be JSON-compatible so the
backends can be swapped.

Key namespace (shared by every implementation):

    devices          list of device dicts          DEVICES_TTL
    player-context   player context dict           PLAYER_CONTEXT_TTL
    artist_<id>      artist dict                   ARTIST_TTL
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import redis

logger = logging.getLogger(__name__)

DEVICES_KEY = "devices"
PLAYER_CONTEXT_KEY = "player-context"
ARTIST_KEY_PREFIX = "artist_"

DEVICES_TTL = 60
PLAYER_CONTEXT_TTL = 15
ARTIST_TTL = 3600


def artist_key(artist_id: str) -> str:
    """Cache key for a single artist."""
    return f"{ARTIST_KEY_PREFIX}{artist_id}"


@dataclass
class CacheEntry:
    """A cached value and its expiry (epoch milliseconds, None = never)."""

    value: Any
    expires_at_ms: Optional[int] = None

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at_ms is not None and now_ms >= self.expires_at_ms


class TTLCache:
    """
    In-process key/value cache with per-entry expiry.

    Expiry is lazy: an expired entry is evicted when it is read.
    ``purge_expired`` may be called to bound memory. All operations hold one
    lock, so scheduled launch steps and caller threads can share a cache.

    Example:
        cache = TTLCache()
        cache.set("devices", devices, ttl_seconds=60)
        devices = cache.get("devices")
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: Returns the current time in epoch seconds. Defaults to
                ``time.time``; tests inject a fake clock.
        """
        self._clock = clock or time.time
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss for {key}")
                return None
            if entry.is_expired(self._now_ms()):
                self._entries.pop(key, None)
                logger.debug(f"Cache entry expired for {key}")
                return None
            logger.debug(f"Cache hit for {key}")
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> bool:
        """
        Store a value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl_seconds: Lifetime in seconds. None or <= 0 keeps the entry
                until it is invalidated.
        """
        expires_at_ms = None
        with self._lock:
            if ttl_seconds is not None and ttl_seconds > 0:
                expires_at_ms = self._now_ms() + int(ttl_seconds * 1000)
            self._entries[key] = CacheEntry(value=value, expires_at_ms=expires_at_ms)
        logger.debug(f"Cached {key} (TTL: {ttl_seconds}s)")
        return True

    def invalidate(self, key: str) -> bool:
        """Remove a key regardless of its TTL."""
        with self._lock:
            self._entries.pop(key, None)
        logger.debug(f"Invalidated cache for {key}")
        return True

    def clear(self) -> bool:
        """Drop every entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cache entries")
        return True

    def purge_expired(self) -> int:
        """Evict all expired entries; returns how many were removed."""
        with self._lock:
            now_ms = self._now_ms()
            expired = [k for k, e in self._entries.items() if e.is_expired(now_ms)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisTTLCache:
    """
    Redis-backed cache with the same interface as ``TTLCache``.

    Redis errors are logged and treated as a miss (reads) or a no-op
    (writes), so a flaky Redis never breaks a read operation.

    Example:
        redis_client = redis.from_url('redis://localhost:6379/0')
        cache = RedisTTLCache(redis_client)
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "musicbridge:cache:",
    ):
        self._redis = redis_client
        self._prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _serialize(self, data: Any) -> bytes:
        """Serialize data to bytes for storage."""
        return json.dumps(data).encode("utf-8")

    def _deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to Python object."""
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    def get(self, key: str) -> Optional[Any]:
        try:
            data = self._redis.get(self._make_key(key))
            if data:
                logger.debug(f"Cache hit for {key}")
                return self._deserialize(data)
            logger.debug(f"Cache miss for {key}")
            return None
        except redis.RedisError as e:
            logger.warning(f"Redis error getting {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> bool:
        try:
            redis_key = self._make_key(key)
            payload = self._serialize(value)
            if ttl_seconds is not None and ttl_seconds > 0:
                self._redis.setex(redis_key, int(max(1, ttl_seconds)), payload)
            else:
                self._redis.set(redis_key, payload)
            logger.debug(f"Cached {key} (TTL: {ttl_seconds}s)")
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis error setting {key}: {e}")
            return False

    def invalidate(self, key: str) -> bool:
        try:
            self._redis.delete(self._make_key(key))
            logger.debug(f"Invalidated cache for {key}")
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis error invalidating {key}: {e}")
            return False

    def clear(self) -> bool:
        """Delete every key under this cache's prefix."""
        try:
            pattern = f"{self._prefix}*"
            cursor = 0
            deleted = 0

            while True:
                cursor, keys = self._redis.scan(cursor, match=pattern, count=100)
                if keys:
                    self._redis.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break

            logger.info(f"Cleared {deleted} cache entries")
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis error clearing cache: {e}")
            return False
