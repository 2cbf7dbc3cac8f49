"""FlagCore: owns the database engine and cache connection.

Dependencies are built explicitly from settings and have a clear lifecycle:

    async with FlagCore(FlagCoreSettings()) as core:
        result = await core.service.evaluate("new-ui", "prod", {"userId": "u1"})
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from flagcore.cache.client import CacheBackend, RedisCache, RedisConfig
from flagcore.cache.memory import InMemoryCache
from flagcore.cache.snapshot import FlagSnapshotCache
from flagcore.config import FlagCoreSettings
from flagcore.db.engine import create_engine, create_schema, get_session_factory
from flagcore.service import FlagService
from flagcore.store.flags import FlagStore

logger = logging.getLogger(__name__)


class FlagCoreNotOpenError(RuntimeError):
    pass


class FlagCore:
    def __init__(
        self,
        settings: FlagCoreSettings | None = None,
        cache: CacheBackend | None = None,
    ) -> None:
        self.settings = settings or FlagCoreSettings()
        self._cache_override = cache
        self._engine: AsyncEngine | None = None
        self._cache: CacheBackend | None = None
        self._snapshots: FlagSnapshotCache | None = None
        self._service: FlagService | None = None

    @property
    def service(self) -> FlagService:
        if self._service is None:
            raise FlagCoreNotOpenError("FlagCore used before open()")
        return self._service

    def _build_cache(self) -> CacheBackend:
        if self._cache_override is not None:
            return self._cache_override
        if self.settings.redis_url:
            return RedisCache(
                RedisConfig(
                    url=self.settings.redis_url,
                    max_connections=self.settings.redis_max_connections,
                    socket_timeout=self.settings.cache_timeout_seconds,
                )
            )
        return InMemoryCache()

    async def open(self) -> None:
        if self._service is not None:
            return
        s = self.settings
        self._engine = create_engine(
            s.database_url,
            echo=s.db_echo,
            pool_size=s.db_pool_size,
            max_overflow=s.db_max_overflow,
        )
        if s.create_schema:
            await create_schema(self._engine)

        self._cache = self._build_cache()
        await self._cache.open()

        store = FlagStore(get_session_factory(self._engine))
        self._snapshots = FlagSnapshotCache(
            store,
            self._cache,
            ttl_seconds=s.cache_ttl_seconds,
            timeout_seconds=s.cache_timeout_seconds,
        )
        self._service = FlagService(store, self._snapshots)
        logger.info("FlagCore opened (cache=%s)", type(self._cache).__name__)

    async def close(self) -> None:
        if self._snapshots is not None:
            await self._snapshots.drain()
        if self._cache is not None:
            await self._cache.close()
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._cache = None
        self._snapshots = None
        self._service = None

    async def __aenter__(self) -> FlagCore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
