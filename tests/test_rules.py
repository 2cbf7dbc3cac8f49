"""Tests for attribute targeting rules."""

from flagcore.eval.rules import matches_rule, matches_rules
from flagcore.models import RuleOp, TargetRule


def rule(attribute: str, op: str, value) -> TargetRule:
    return TargetRule(attribute=attribute, op=op, value=value)


class TestEq:
    def test_equal_string(self):
        assert matches_rule(rule("role", "eq", "admin"), {"role": "admin"})

    def test_different_string(self):
        assert not matches_rule(rule("role", "eq", "admin"), {"role": "viewer"})

    def test_absent_attribute_never_equal(self):
        assert not matches_rule(rule("role", "eq", "admin"), {})
        assert not matches_rule(rule("role", "eq", "admin"), {"role": None})

    def test_strict_no_cross_type_equality(self):
        assert not matches_rule(rule("beta", "eq", 1), {"beta": True})
        assert not matches_rule(rule("beta", "eq", True), {"beta": 1})
        assert not matches_rule(rule("age", "eq", "30"), {"age": 30})

    def test_int_and_float_compare_numerically(self):
        assert matches_rule(rule("age", "eq", 30), {"age": 30.0})

    def test_boolean(self):
        assert matches_rule(rule("beta", "eq", True), {"beta": True})
        assert not matches_rule(rule("beta", "eq", True), {"beta": False})


class TestNeq:
    def test_different_value_matches(self):
        assert matches_rule(rule("country", "neq", "US"), {"country": "DE"})

    def test_same_value_does_not_match(self):
        assert not matches_rule(rule("country", "neq", "US"), {"country": "US"})

    def test_absent_attribute_matches(self):
        assert matches_rule(rule("country", "neq", "US"), {})


class TestMembership:
    def test_in_list(self):
        assert matches_rule(rule("plan", "in", ["pro", "enterprise"]), {"plan": "pro"})
        assert not matches_rule(rule("plan", "in", ["pro", "enterprise"]), {"plan": "free"})

    def test_nin_list(self):
        assert matches_rule(rule("plan", "nin", ["free"]), {"plan": "pro"})
        assert not matches_rule(rule("plan", "nin", ["free"]), {"plan": "free"})

    def test_absent_attribute(self):
        assert not matches_rule(rule("plan", "in", ["pro"]), {})
        assert matches_rule(rule("plan", "nin", ["pro"]), {})

    def test_membership_is_strict(self):
        assert not matches_rule(rule("tier", "in", [1, 2]), {"tier": True})
        assert matches_rule(rule("tier", "in", [1, 2]), {"tier": 2})

    def test_scalar_value_never_matches(self):
        assert not matches_rule(rule("plan", "in", "pro"), {"plan": "pro"})
        assert not matches_rule(rule("plan", "nin", "pro"), {"plan": "free"})


class TestRuleList:
    def test_empty_list_matches_everything(self):
        assert matches_rules([], {})
        assert matches_rules([], {"userId": "u1", "role": "admin"})

    def test_all_rules_must_match(self):
        rules = [rule("role", "eq", "admin"), rule("country", "in", ["US", "CA"])]
        assert matches_rules(rules, {"role": "admin", "country": "CA"})
        assert not matches_rules(rules, {"role": "admin", "country": "DE"})
        assert not matches_rules(rules, {"role": "viewer", "country": "US"})

    def test_operator_enum_is_closed(self):
        assert {op.value for op in RuleOp} == {"eq", "neq", "in", "nin"}
