"""Flag snapshot caching."""

from flagcore.cache.client import CacheBackend, CacheNotOpenError, RedisCache, RedisConfig
from flagcore.cache.memory import InMemoryCache
from flagcore.cache.snapshot import FlagSnapshotCache

__all__ = [
    "CacheBackend",
    "CacheNotOpenError",
    "FlagSnapshotCache",
    "InMemoryCache",
    "RedisCache",
    "RedisConfig",
]
