"""Flag evaluation: hashing, targeting rules, rollout and variant selection."""

from flagcore.eval.engine import evaluate_flag
from flagcore.eval.hashing import deterministic_hash
from flagcore.eval.rollout import passes_rollout, pick_variant, subject_id
from flagcore.eval.rules import matches_rule, matches_rules

__all__ = [
    "deterministic_hash",
    "evaluate_flag",
    "matches_rule",
    "matches_rules",
    "passes_rollout",
    "pick_variant",
    "subject_id",
]
