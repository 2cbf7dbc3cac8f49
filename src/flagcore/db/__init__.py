"""Persistence: async SQLAlchemy engine and table models."""

from flagcore.db.engine import create_engine, create_schema, get_session_factory
from flagcore.db.models import AuditLogRow, Base, FlagRow

__all__ = [
    "AuditLogRow",
    "Base",
    "FlagRow",
    "create_engine",
    "create_schema",
    "get_session_factory",
]
