"""Runtime configuration via environment variables (prefix FLAGCORE_)."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlagCoreSettings(BaseSettings):
    """All configuration loaded from env vars or .env file."""

    # Store of record
    database_url: str = "sqlite+aiosqlite:///flagcore.db"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_echo: bool = False
    create_schema: bool = True

    # Snapshot cache; without a Redis URL each process caches in memory
    redis_url: str | None = None
    redis_max_connections: int = 20
    cache_ttl_seconds: int = Field(default=60, gt=0)
    cache_timeout_seconds: float = Field(default=0.25, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="FLAGCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
