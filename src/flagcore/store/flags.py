"""Flag store: versioned flag documents with audit-backed rollback.

Every successful mutation writes the flag row and its audit entry in one
transaction. The row write is a compare-and-set on ``version``, so two
writers racing on the same key cannot both commit: the loser gets
VersionConflictError and nothing of its write is stored.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flagcore.db.models import FlagRow
from flagcore.models import AuditAction, AuditLogEntry, Flag, FlagDefinition
from flagcore.store.audit import AuditLog

logger = logging.getLogger(__name__)


class VersionConflictError(Exception):
    """Another writer changed the flag between our read and our write."""

    def __init__(self, key: str, expected: int, actual: int | None = None) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(f"version conflict on flag {key!r}: expected={expected}, actual={actual}")


def now_ms() -> int:
    return int(time.time() * 1000)


def _to_flag(row: FlagRow) -> Flag:
    return Flag(
        key=row.key,
        type=row.type,
        envs=json.loads(row.envs_json),
        description=row.description,
        version=row.version,
        created_by=row.created_by,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
    )


def _row_values(flag: Flag) -> dict[str, Any]:
    return {
        "key": flag.key,
        "type": flag.type.value,
        "version": flag.version,
        "envs_json": json.dumps([e.model_dump(mode="json", by_alias=True) for e in flag.envs]),
        "description": flag.description,
        "created_by": flag.created_by,
        "updated_by": flag.updated_by,
        "updated_at": flag.updated_at,
    }


class FlagStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        audit: AuditLog | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._session_factory = session_factory
        self.audit = audit or AuditLog(session_factory)
        self._clock = clock

    async def get_by_key(self, key: str) -> Flag | None:
        async with self._session_factory() as session:
            row = await session.get(FlagRow, key)
            return _to_flag(row) if row is not None else None

    async def list_all(self) -> list[Flag]:
        """All flags ordered by key."""
        async with self._session_factory() as session:
            rows = (await session.execute(select(FlagRow).order_by(FlagRow.key))).scalars().all()
        return [_to_flag(r) for r in rows]

    async def upsert(
        self,
        actor: str,
        definition: FlagDefinition | dict[str, Any],
        expected_version: int | None = None,
    ) -> Flag:
        """Create or replace a flag, bumping its version by one.

        Bookkeeping fields in *definition* (version, createdBy, ...) are
        ignored. With *expected_version*, the write only happens if the stored
        version (0 for a new flag) still equals it.
        """
        if not isinstance(definition, FlagDefinition):
            definition = FlagDefinition.model_validate(definition)

        async with self._session_factory() as session:
            async with session.begin():
                existing = await session.get(FlagRow, definition.key)
                current = existing.version if existing is not None else 0
                if expected_version is not None and expected_version != current:
                    raise VersionConflictError(definition.key, expected_version, current)

                flag = Flag(
                    key=definition.key,
                    type=definition.type,
                    envs=definition.envs,
                    description=definition.description,
                    version=current + 1,
                    created_by=existing.created_by if existing is not None else actor,
                    updated_by=actor,
                    updated_at=self._clock(),
                )
                await self._write(session, flag, existing.version if existing is not None else None)

                action = AuditAction.UPDATE if existing is not None else AuditAction.CREATE
                AuditLog.append(
                    session,
                    AuditLogEntry(
                        ts=flag.updated_at,
                        actor=actor,
                        entity_id=flag.key,
                        action=action,
                        data=flag.to_document(),
                    ),
                )

        logger.info("Flag %s %s to version %d by %s", flag.key, action.value, flag.version, actor)
        return flag

    async def rollback(self, actor: str, key: str, to_version: int) -> Flag | None:
        """Restore the snapshot recorded for *to_version*.

        The restored flag reports ``version == to_version``; the next upsert
        continues counting from there. Returns None, writing nothing, when
        the audit log holds no snapshot for that version.
        """
        async with self._session_factory() as session:
            async with session.begin():
                snapshot = await AuditLog.find_snapshot_in(session, key, to_version)
                if snapshot is None:
                    logger.info("Rollback of %s to version %d: no snapshot", key, to_version)
                    return None

                existing = await session.get(FlagRow, key)
                restored = snapshot.model_copy(
                    update={
                        "version": to_version,
                        "updated_at": self._clock(),
                        "updated_by": actor,
                    }
                )
                await self._write(session, restored, existing.version if existing is not None else None)
                AuditLog.append(
                    session,
                    AuditLogEntry(
                        ts=restored.updated_at,
                        actor=actor,
                        entity_id=key,
                        action=AuditAction.ROLLBACK,
                        data={"toVersion": to_version, "appliedVersion": restored.version},
                    ),
                )

        logger.info("Flag %s rolled back to version %d by %s", key, to_version, actor)
        return restored

    async def _write(self, session: AsyncSession, flag: Flag, expected_version: int | None) -> None:
        values = _row_values(flag)
        if expected_version is None:
            session.add(FlagRow(**values))
            try:
                await session.flush()
            except IntegrityError as e:
                raise VersionConflictError(flag.key, 0) from e
            return

        stmt = (
            update(FlagRow)
            .where(FlagRow.key == flag.key, FlagRow.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount != 1:
            raise VersionConflictError(flag.key, expected_version)
