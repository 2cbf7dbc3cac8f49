"""Cache backends for flag snapshots.

Key pattern:
  flags:{env} : JSON array of every flag document, written with a TTL

The Redis client is created by ``open()`` and released by ``close()``;
nothing connects implicitly on first use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import redis.asyncio as aioredis


class CacheNotOpenError(RuntimeError):
    pass


class CacheBackend(ABC):
    """String key/value cache with per-key TTL."""

    async def open(self) -> None:
        return None

    @abstractmethod
    async def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    async def close(self) -> None:
        return None


@dataclass
class RedisConfig:
    url: str = "redis://localhost:6379/0"
    max_connections: int = 20
    socket_timeout: float = 0.5


class RedisCache(CacheBackend):
    def __init__(self, config: RedisConfig) -> None:
        self.config = config
        self._client: aioredis.Redis | None = None

    async def open(self) -> None:
        if self._client is None:
            self._client = aioredis.from_url(
                self.config.url,
                max_connections=self.config.max_connections,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_timeout,
                decode_responses=True,
            )

    async def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            raise CacheNotOpenError("RedisCache used before open()")
        return self._client

    async def get(self, key: str) -> str | None:
        client = await self._get_client()
        return await client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        client = await self._get_client()
        await client.set(key, value, ex=ttl_seconds)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
