"""Shared fixtures: in-memory SQLite store and flag builders."""

import itertools

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from flagcore.db.models import Base
from flagcore.store.flags import FlagStore

# Use in-memory SQLite for unit tests (no Docker dependency)
TEST_DB_URL = "sqlite+aiosqlite:///file::memory:?cache=shared&uri=true"

START_TS = 1_700_000_000_000


@pytest.fixture
async def db_engine():
    engine = create_async_engine(TEST_DB_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def clock():
    ticks = itertools.count(START_TS)
    return lambda: next(ticks)


@pytest.fixture
def store(session_factory, clock):
    return FlagStore(session_factory, clock=clock)


def make_definition(key: str = "new-ui", **overrides) -> dict:
    definition = {
        "key": key,
        "type": "boolean",
        "description": f"Description for {key}",
        "envs": [
            {"env": "dev", "defaultValue": True, "rollout": {"percentage": 100}},
            {"env": "prod", "defaultValue": False, "rollout": {"percentage": 50}},
        ],
    }
    definition.update(overrides)
    return definition
