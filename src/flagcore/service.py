"""Flag service: the interface calling services use.

Raw input (environment names, context bags, flag definitions) is validated
here, so the evaluation engine only ever sees typed values. Unknown flags
are reported as None, or as a ``flag-not-found`` result inside a batch.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from flagcore.cache.snapshot import FlagSnapshotCache
from flagcore.eval.engine import evaluate_flag
from flagcore.models import (
    AuditLogEntry,
    Environment,
    EvaluationReason,
    EvaluationResult,
    Flag,
    FlagDefinition,
    parse_context,
)
from flagcore.store.flags import FlagStore


class FlagService:
    def __init__(self, store: FlagStore, snapshots: FlagSnapshotCache) -> None:
        self._store = store
        self._snapshots = snapshots

    async def evaluate(
        self,
        flag_key: str,
        env: Environment | str,
        context: dict[str, Any] | None = None,
    ) -> EvaluationResult | None:
        env = Environment(env)
        ctx = parse_context(context)
        flags = await self._snapshots.load(env)
        for flag in flags:
            if flag.key == flag_key:
                return evaluate_flag(flag, env, ctx)
        return None

    async def evaluate_batch(
        self,
        flag_keys: Iterable[str],
        env: Environment | str,
        context: dict[str, Any] | None = None,
    ) -> list[EvaluationResult]:
        env = Environment(env)
        ctx = parse_context(context)
        by_key = {f.key: f for f in await self._snapshots.load(env)}
        results = []
        for key in flag_keys:
            flag = by_key.get(key)
            if flag is None:
                results.append(EvaluationResult(key=key, value=None, reason=EvaluationReason.FLAG_NOT_FOUND))
            else:
                results.append(evaluate_flag(flag, env, ctx))
        return results

    async def list_flags(self) -> list[Flag]:
        return await self._store.list_all()

    async def get_flag(self, key: str) -> Flag | None:
        return await self._store.get_by_key(key)

    async def upsert_flag(
        self,
        actor: str,
        flag_def: FlagDefinition | dict[str, Any],
        expected_version: int | None = None,
    ) -> Flag:
        return await self._store.upsert(actor, flag_def, expected_version=expected_version)

    async def rollback_flag(self, actor: str, key: str, to_version: int) -> Flag | None:
        return await self._store.rollback(actor, key, to_version)

    async def audit_history(self, key: str, limit: int = 100) -> list[AuditLogEntry]:
        return await self._store.audit.history(key, limit=limit)
