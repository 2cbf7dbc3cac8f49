"""Flag store and audit log."""

from flagcore.store.audit import AuditLog
from flagcore.store.flags import FlagStore, VersionConflictError, now_ms

__all__ = [
    "AuditLog",
    "FlagStore",
    "VersionConflictError",
    "now_ms",
]
