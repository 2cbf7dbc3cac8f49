"""Flag audit log: append-only record of every flag mutation.

The log is also the version history: create/update entries carry the full
flag document, and rollback recovers a past version from them. Entries are
never updated or deleted here; retention is an external housekeeping job.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flagcore.db.models import AuditLogRow
from flagcore.models import AuditAction, AuditLogEntry, Flag

logger = logging.getLogger(__name__)

ENTITY_TYPE_FLAG = "flag"
_SNAPSHOT_ACTIONS = (AuditAction.CREATE.value, AuditAction.UPDATE.value)


def _to_entry(row: AuditLogRow) -> AuditLogEntry:
    return AuditLogEntry(
        ts=row.ts,
        actor=row.actor,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        action=AuditAction(row.action),
        data=json.loads(row.data_json),
    )


class AuditLog:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def append(session: AsyncSession, entry: AuditLogEntry) -> None:
        """Stage *entry* in the caller's transaction."""
        version = entry.data.get("version") if entry.action != AuditAction.ROLLBACK else None
        session.add(
            AuditLogRow(
                ts=entry.ts,
                actor=entry.actor,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                action=entry.action.value,
                version=version,
                data_json=json.dumps(entry.data),
            )
        )

    @staticmethod
    async def find_snapshot_in(session: AsyncSession, key: str, version: int) -> Flag | None:
        # Earliest entry wins when a version number was reused after a rollback.
        stmt = (
            select(AuditLogRow)
            .where(
                AuditLogRow.entity_type == ENTITY_TYPE_FLAG,
                AuditLogRow.entity_id == key,
                AuditLogRow.version == version,
                AuditLogRow.action.in_(_SNAPSHOT_ACTIONS),
            )
            .order_by(AuditLogRow.id)
            .limit(1)
        )
        row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        try:
            return Flag.model_validate(json.loads(row.data_json))
        except ValueError as e:
            logger.warning("Unreadable audit snapshot %s@%d (entry %d): %s", key, version, row.id, e)
            return None

    async def find_snapshot(self, key: str, version: int) -> Flag | None:
        async with self._session_factory() as session:
            return await self.find_snapshot_in(session, key, version)

    async def query(
        self,
        *,
        entity_id: str | None = None,
        actor: str | None = None,
        action: AuditAction | None = None,
        start_ts: int | None = None,
        end_ts: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditLogEntry]:
        """Newest-first audit entries matching every given filter."""
        stmt = select(AuditLogRow).where(AuditLogRow.entity_type == ENTITY_TYPE_FLAG)
        if entity_id is not None:
            stmt = stmt.where(AuditLogRow.entity_id == entity_id)
        if actor is not None:
            stmt = stmt.where(AuditLogRow.actor == actor)
        if action is not None:
            stmt = stmt.where(AuditLogRow.action == AuditAction(action).value)
        if start_ts is not None:
            stmt = stmt.where(AuditLogRow.ts >= start_ts)
        if end_ts is not None:
            stmt = stmt.where(AuditLogRow.ts <= end_ts)
        stmt = stmt.order_by(AuditLogRow.ts.desc(), AuditLogRow.id.desc()).limit(limit).offset(offset)

        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_entry(r) for r in rows]

    async def history(self, key: str, limit: int = 1000) -> list[AuditLogEntry]:
        return await self.query(entity_id=key, limit=limit)
