"""Percentage rollout gate and weighted variant selection.

Both bucket a subject by hashing ``{salt}:{subject_id}``. The default salt is
``{key}:{version}:{env}``, so buckets reshuffle whenever the flag version
changes unless the rollout pins an explicit salt.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from decimal import Decimal

from flagcore.eval.hashing import deterministic_hash
from flagcore.models import ContextValue, Environment, PercentageRollout, VariantOption

ANONYMOUS_SUBJECT = "anon"
_SUBJECT_ATTRIBUTES = ("userId", "id")


def _number_to_str(value: float) -> str:
    """Render a number the way JavaScript's ``Number#toString`` does.

    Uses the shortest round-trip digits (``repr``), then JavaScript's layout:
    plain decimal for 1e-7 <= |x| < 1e21, exponent form (``1e-7``,
    ``1.5e+21``) outside it.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    if value < 0:
        return "-" + _number_to_str(-value)

    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k  # value == 0.<digits> * 10**n

    if k <= n <= 21:
        return digits + "0" * (n - k)
    if 0 < n <= 21:
        return f"{digits[:n]}.{digits[n:]}"
    if -6 < n <= 0:
        return "0." + "0" * -n + digits
    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def _stringify(value: ContextValue) -> str:
    # Matches how JSON clients render scalars, so ids bucket identically.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value) if abs(value) < 10**21 else _number_to_str(float(value))
    if isinstance(value, float):
        return _number_to_str(value)
    return str(value)


def subject_id(context: Mapping[str, ContextValue]) -> str:
    """Stable bucketing id. Contexts without one all share the "anon" bucket."""
    for attribute in _SUBJECT_ATTRIBUTES:
        value = context.get(attribute)
        if value is not None:
            return _stringify(value)
    return ANONYMOUS_SUBJECT


def default_salt(key: str, version: int, env: Environment | str) -> str:
    return f"{key}:{version}:{Environment(env).value}"


def passes_rollout(
    rollout: PercentageRollout,
    key: str,
    version: int,
    env: Environment,
    context: Mapping[str, ContextValue],
) -> bool:
    if rollout.percentage <= 0:
        return False
    salt = rollout.salt or default_salt(key, version, env)
    r = deterministic_hash(f"{salt}:{subject_id(context)}") * 100
    return r <= rollout.percentage


def pick_variant(
    variants: Sequence[VariantOption],
    salt_base: str,
    context: Mapping[str, ContextValue],
) -> VariantOption:
    if not variants:
        raise ValueError("pick_variant requires at least one variant")

    weights = [1.0 if v.weight is None else v.weight for v in variants]
    total = sum(weights)
    if total <= 0:
        return variants[-1]

    r = deterministic_hash(f"{salt_base}:{subject_id(context)}")
    cumulative = 0.0
    for variant, weight in zip(variants, weights):
        cumulative += weight / total
        if cumulative >= r:
            return variant
    return variants[-1]
