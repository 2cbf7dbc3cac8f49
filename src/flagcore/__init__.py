"""flagcore: feature flag evaluation, versioned storage and snapshot caching."""

from flagcore.config import FlagCoreSettings
from flagcore.core import FlagCore
from flagcore.eval.engine import evaluate_flag
from flagcore.models import (
    AuditAction,
    AuditLogEntry,
    EnvConfig,
    Environment,
    EvaluationReason,
    EvaluationResult,
    Flag,
    FlagDefinition,
    FlagType,
    PercentageRollout,
    RuleOp,
    TargetRule,
    VariantOption,
)
from flagcore.service import FlagService
from flagcore.store.flags import VersionConflictError

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "EnvConfig",
    "Environment",
    "EvaluationReason",
    "EvaluationResult",
    "Flag",
    "FlagCore",
    "FlagCoreSettings",
    "FlagDefinition",
    "FlagService",
    "FlagType",
    "PercentageRollout",
    "RuleOp",
    "TargetRule",
    "VariantOption",
    "VersionConflictError",
    "evaluate_flag",
]
