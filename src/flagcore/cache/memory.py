"""In-process cache backend: TTL + LRU eviction.

Used when no Redis URL is configured; each process then keeps its own
snapshot copy.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass

from flagcore.cache.client import CacheBackend


@dataclass
class _Entry:
    value: str
    expires_at: float


class InMemoryCache(CacheBackend):
    def __init__(self, max_entries: int = 64) -> None:
        self._max = max_entries
        self._data: OrderedDict[str, _Entry] = OrderedDict()

    async def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if time.monotonic() >= entry.expires_at:
            del self._data[key]
            return None
        self._data.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = _Entry(value=value, expires_at=time.monotonic() + ttl_seconds)
        while len(self._data) > self._max:
            self._data.popitem(last=False)

    async def close(self) -> None:
        self._data.clear()
