"""Attribute targeting rules.

A rule list is a logical AND: rules are checked in order and the first
non-matching rule ends evaluation. An empty list matches every context.

Equality is strict: a boolean never equals a number and a string never equals
a number. Attributes missing from the context are "absent" and equal nothing.
``in``/``nin`` need a list value; any other shape is a non-match.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from flagcore.models import ContextValue, RuleOp, TargetRule


def _strict_equal(left: object, right: object) -> bool:
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    return left == right


def _contains(candidates: object, value: ContextValue) -> bool | None:
    if not isinstance(candidates, list):
        return None
    return any(_strict_equal(value, c) for c in candidates)


def _eq(rule: TargetRule, value: ContextValue) -> bool:
    return _strict_equal(value, rule.value)


def _neq(rule: TargetRule, value: ContextValue) -> bool:
    return not _strict_equal(value, rule.value)


def _in(rule: TargetRule, value: ContextValue) -> bool:
    return _contains(rule.value, value) is True


def _nin(rule: TargetRule, value: ContextValue) -> bool:
    return _contains(rule.value, value) is False


_OPERATORS: dict[RuleOp, Callable[[TargetRule, ContextValue], bool]] = {
    RuleOp.EQ: _eq,
    RuleOp.NEQ: _neq,
    RuleOp.IN: _in,
    RuleOp.NIN: _nin,
}


def matches_rule(rule: TargetRule, context: Mapping[str, ContextValue]) -> bool:
    check = _OPERATORS.get(rule.op)
    if check is None:
        return False
    return check(rule, context.get(rule.attribute))


def matches_rules(rules: Sequence[TargetRule], context: Mapping[str, ContextValue]) -> bool:
    for rule in rules:
        if not matches_rule(rule, context):
            return False
    return True
