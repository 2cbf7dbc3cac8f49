"""Pydantic v2 models for flag documents, audit entries and evaluation results.

Wire names are camelCase (defaultValue, updatedAt, entityId, ...) and are part
of the contract with existing callers. Python attributes stay snake_case;
both spellings are accepted on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class Environment(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class FlagType(str, Enum):
    BOOLEAN = "boolean"
    MULTIVARIATE = "multivariate"
    JSON = "json"


class RuleOp(str, Enum):
    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    NIN = "nin"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    ROLLBACK = "rollback"


class EvaluationReason(str, Enum):
    ENV_MISSING_FALLBACK = "env-missing-fallback"
    RULES_NO_MATCH_FALLBACK = "rules-no-match-fallback"
    ROLLOUT_PERCENTAGE_FALLBACK = "rollout-percentage-fallback"
    VARIANT_SELECTED = "variant-selected"
    JSON_SELECTED = "json-selected"
    DEFAULT = "default"
    FLAG_NOT_FOUND = "flag-not-found"


# Context attribute values: string | number | boolean | absent (None).
ContextValue = Union[str, bool, int, float, None]
RuleScalar = Union[str, bool, int, float]

EvaluationContext = dict[str, ContextValue]
_context_adapter: TypeAdapter[EvaluationContext] = TypeAdapter(EvaluationContext)


def parse_context(raw: Any) -> EvaluationContext:
    """Validate a caller-supplied context bag. ``None`` means empty."""
    if raw is None:
        return {}
    return _context_adapter.validate_python(raw, strict=True)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Flag definition ─────────────────────────────────────────────────────────


class TargetRule(_WireModel):
    attribute: str
    op: RuleOp
    value: Union[RuleScalar, list[RuleScalar]]


class PercentageRollout(_WireModel):
    percentage: float = Field(ge=0, le=100)
    salt: str | None = None


class VariantOption(_WireModel):
    key: str
    weight: float | None = Field(default=None, ge=0)
    value: Any = None


class EnvConfig(_WireModel):
    env: Environment
    default_value: Any
    rules: list[TargetRule] | None = None
    rollout: PercentageRollout | None = None
    variants: list[VariantOption] | None = None


class FlagDefinition(_WireModel):
    """The caller-editable part of a flag, as accepted by upsert."""

    key: str = Field(min_length=1)
    type: FlagType
    envs: list[EnvConfig] = Field(default_factory=list)
    description: str | None = None


class Flag(FlagDefinition):
    version: int = Field(ge=1)
    created_by: str
    updated_by: str
    updated_at: int

    def env_config(self, env: Environment) -> EnvConfig | None:
        for cfg in self.envs:
            if cfg.env == env:
                return cfg
        return None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


flag_list_adapter: TypeAdapter[list[Flag]] = TypeAdapter(list[Flag])


# ── Audit ───────────────────────────────────────────────────────────────────


class AuditLogEntry(_WireModel):
    ts: int
    actor: str
    entity_type: str = "flag"
    entity_id: str
    action: AuditAction
    data: dict[str, Any] = Field(default_factory=dict)


# ── Evaluation ──────────────────────────────────────────────────────────────


class EvaluationResult(_WireModel):
    key: str
    value: Any = None
    variant: str | None = None
    reason: EvaluationReason

    def as_dict(self) -> dict[str, Any]:
        """Wire shape: ``variant`` only present when a variant was chosen."""
        payload = self.model_dump(mode="json", by_alias=True)
        if payload["variant"] is None:
            del payload["variant"]
        return payload
