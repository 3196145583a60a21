"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null).

The geolocation resolver is the main consumer: entries are JSON strings
keyed by IP with a 24h TTL.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional, Dict, Tuple


logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """
    String key-value store with per-entry expiry.

    Backend failures are not raised: a failed read is a miss and a failed
    write returns False.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Stored string, or None when absent or expired"""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """
        Store `value` under `key` for `ttl` seconds.

        Returns:
            False when the backend rejected the write
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """True if the key was present"""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def clear(self) -> bool:
        """Drop every entry"""


class RedisCache(CacheStrategy):
    """
    Redis cache implementation (redis.asyncio client).

    Shared between all application instances; Redis handles concurrent
    access and TTL expiry, so no locking is done here.
    """

    def __init__(self, redis_client):
        """
        Initialize Redis cache.

        Args:
            redis_client: redis.asyncio.Redis instance
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(key)
            if value is None:
                return None
            return value.decode("utf-8") if isinstance(value, bytes) else value
        except Exception as e:
            logger.warning("Redis get error for %s: %s", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        try:
            return bool(await self.redis.setex(key, ttl, value))
        except Exception as e:
            logger.warning("Redis set error for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.redis.delete(key))
        except Exception as e:
            logger.warning("Redis delete error for %s: %s", key, e)
            return False

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self.redis.exists(key))
        except Exception as e:
            logger.warning("Redis exists error for %s: %s", key, e)
            return False

    async def clear(self) -> bool:
        """Clear all Redis keys (use with caution!)"""
        try:
            await self.redis.flushdb()
            return True
        except Exception as e:
            logger.warning("Redis clear error: %s", e)
            return False


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using a Python dict.

    Entries store their expiry deadline and are evicted lazily on read.
    Not shared between processes; good for development and testing.
    """

    def __init__(self):
        self._cache: Dict[str, Tuple[str, float]] = {}

    def _live_value(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if time.monotonic() >= deadline:
            del self._cache[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live_value(key)

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        self._cache[key] = (value, time.monotonic() + ttl)
        return True

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return self._live_value(key) is not None

    async def clear(self) -> bool:
        self._cache.clear()
        return True


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Every lookup is a miss, so each geolocation goes to the provider.
    """

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def exists(self, key: str) -> bool:
        return False

    async def clear(self) -> bool:
        return True
