"""Cache-aside snapshot of all flags, keyed per environment.

Reads never fail because of the cache: an unreachable, slow or corrupt cache
is logged and treated as a miss, and the flags come from the store. After a
miss the fresh snapshot is returned straight away and written back in a
background task; write failures are logged and dropped.

There is no invalidation on write. A mutation becomes visible to readers of
a cached environment once the entry's TTL runs out.
"""

from __future__ import annotations

import asyncio
import json
import logging

from flagcore.cache.client import CacheBackend
from flagcore.models import Environment, Flag, flag_list_adapter
from flagcore.store.flags import FlagStore

logger = logging.getLogger(__name__)


class FlagSnapshotCache:
    def __init__(
        self,
        store: FlagStore,
        cache: CacheBackend,
        ttl_seconds: int = 60,
        timeout_seconds: float = 0.25,
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds
        self._pending: set[asyncio.Task] = set()

    @staticmethod
    def cache_key(env: Environment) -> str:
        return f"flags:{env.value}"

    async def load(self, env: Environment) -> list[Flag]:
        cached = await self._read(env)
        if cached is not None:
            return cached
        flags = await self._store.list_all()
        self._schedule_write(env, flags)
        return flags

    async def drain(self) -> None:
        """Wait for background cache writes still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def _read(self, env: Environment) -> list[Flag] | None:
        key = self.cache_key(env)
        try:
            raw = await asyncio.wait_for(self._cache.get(key), timeout=self._timeout)
        except Exception as e:
            logger.warning("Cache read %s failed, using store: %r", key, e)
            return None
        if raw is None:
            return None
        try:
            return flag_list_adapter.validate_json(raw)
        except ValueError as e:
            logger.warning("Corrupt cache entry %s ignored: %s", key, e)
            return None

    def _schedule_write(self, env: Environment, flags: list[Flag]) -> None:
        key = self.cache_key(env)
        payload = json.dumps([f.to_document() for f in flags])
        task = asyncio.create_task(self._write(key, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, key: str, payload: str) -> None:
        try:
            await asyncio.wait_for(self._cache.set(key, payload, self._ttl), timeout=self._timeout)
        except Exception as e:
            logger.warning("Cache write %s failed: %r", key, e)
