"""
Selects the cache backend named in settings and keeps one shared instance.
"""

import logging
from enum import Enum

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from shortlink_app.config import settings


logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Values accepted by settings.cache_backend"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Process-wide cache holder.

    The first create() call decides the backend; later calls return the
    same object whatever backend they ask for. Redis connection details
    come from settings.redis_url.
    """

    _instance: CacheStrategy = None

    @classmethod
    def create(cls, backend: CacheBackend) -> CacheStrategy:
        if cls._instance is not None:
            return cls._instance

        if backend == CacheBackend.REDIS:
            from redis import asyncio as aioredis

            # No ping here: the client connects lazily and RedisCache treats
            # an unreachable server as a miss on every call
            client = aioredis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            cls._instance = RedisCache(client)
        elif backend == CacheBackend.MEMORY:
            cls._instance = InMemoryCache()
        elif backend == CacheBackend.NULL:
            cls._instance = NullCache()
        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        logger.info("Using %s cache backend", backend.value)
        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Forget the shared instance (tests)"""
        cls._instance = None
