"""Evaluation engine: resolves one flag for one environment and context.

Decision order, first applicable wins:
  1. no config for env      -> envs[0].defaultValue   (env-missing-fallback)
  2. rules present, no match -> defaultValue          (rules-no-match-fallback)
  3. rollout gate fails      -> defaultValue          (rollout-percentage-fallback)
  4. multivariate + variants -> variant value or key  (variant-selected)
  5. json + variants         -> variant value or default (json-selected)
  6. otherwise               -> defaultValue          (default)

Pure: no I/O and no mutation, safe to call from any number of tasks/threads.
"""

from __future__ import annotations

from collections.abc import Mapping

from flagcore.eval.rollout import default_salt, passes_rollout, pick_variant
from flagcore.eval.rules import matches_rules
from flagcore.models import (
    ContextValue,
    Environment,
    EvaluationReason,
    EvaluationResult,
    Flag,
    FlagType,
)


def evaluate_flag(
    flag: Flag,
    env: Environment | str,
    context: Mapping[str, ContextValue],
) -> EvaluationResult:
    env = Environment(env)
    env_cfg = flag.env_config(env)
    if env_cfg is None:
        # Compatibility: first configured env, not a per-env default.
        fallback = flag.envs[0].default_value if flag.envs else None
        return EvaluationResult(
            key=flag.key, value=fallback, reason=EvaluationReason.ENV_MISSING_FALLBACK
        )

    if env_cfg.rules and not matches_rules(env_cfg.rules, context):
        return EvaluationResult(
            key=flag.key,
            value=env_cfg.default_value,
            reason=EvaluationReason.RULES_NO_MATCH_FALLBACK,
        )

    if env_cfg.rollout is not None and not passes_rollout(
        env_cfg.rollout, flag.key, flag.version, env, context
    ):
        return EvaluationResult(
            key=flag.key,
            value=env_cfg.default_value,
            reason=EvaluationReason.ROLLOUT_PERCENTAGE_FALLBACK,
        )

    if env_cfg.variants and flag.type in (FlagType.MULTIVARIATE, FlagType.JSON):
        chosen = pick_variant(env_cfg.variants, default_salt(flag.key, flag.version, env), context)
        if flag.type == FlagType.MULTIVARIATE:
            value = chosen.value if chosen.value is not None else chosen.key
            reason = EvaluationReason.VARIANT_SELECTED
        else:
            value = chosen.value if chosen.value is not None else env_cfg.default_value
            reason = EvaluationReason.JSON_SELECTED
        return EvaluationResult(key=flag.key, value=value, variant=chosen.key, reason=reason)

    return EvaluationResult(key=flag.key, value=env_cfg.default_value, reason=EvaluationReason.DEFAULT)
