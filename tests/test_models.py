"""Tests for flag document models and boundary validation."""

import pytest
from pydantic import ValidationError

from flagcore.models import (
    EnvConfig,
    Environment,
    Flag,
    FlagDefinition,
    PercentageRollout,
    RuleOp,
    TargetRule,
    VariantOption,
    parse_context,
)


class TestWireNames:
    def test_camel_case_input(self):
        cfg = EnvConfig.model_validate({"env": "prod", "defaultValue": {"a": 1}})
        assert cfg.env == Environment.PROD
        assert cfg.default_value == {"a": 1}

    def test_snake_case_input(self):
        cfg = EnvConfig(env="dev", default_value=False)
        assert cfg.default_value is False

    def test_document_uses_camel_case(self):
        flag = Flag(
            key="new-ui",
            type="boolean",
            envs=[EnvConfig(env="dev", default_value=True)],
            version=1,
            created_by="alice",
            updated_by="alice",
            updated_at=123,
        )
        doc = flag.to_document()
        assert doc["createdBy"] == "alice"
        assert doc["updatedAt"] == 123
        assert doc["envs"][0]["defaultValue"] is True
        assert doc["type"] == "boolean"

    def test_null_default_value_allowed(self):
        cfg = EnvConfig.model_validate({"env": "dev", "defaultValue": None})
        assert cfg.default_value is None

    def test_default_value_required(self):
        with pytest.raises(ValidationError):
            EnvConfig.model_validate({"env": "dev"})


class TestValidation:
    def test_unknown_env_rejected(self):
        with pytest.raises(ValidationError):
            EnvConfig.model_validate({"env": "qa", "defaultValue": 1})

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValidationError):
            TargetRule.model_validate({"attribute": "age", "op": "gt", "value": 3})

    def test_rule_value_types(self):
        assert TargetRule(attribute="a", op="eq", value=True).value is True
        assert TargetRule(attribute="a", op="eq", value=3).value == 3
        assert TargetRule(attribute="a", op="in", value=["x", 1]).value == ["x", 1]
        assert TargetRule(attribute="a", op="eq", value="x").op == RuleOp.EQ

    def test_percentage_bounds(self):
        PercentageRollout(percentage=0)
        PercentageRollout(percentage=100)
        with pytest.raises(ValidationError):
            PercentageRollout(percentage=-1)
        with pytest.raises(ValidationError):
            PercentageRollout(percentage=100.5)

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            VariantOption(key="a", weight=-1)

    def test_definition_requires_key(self):
        with pytest.raises(ValidationError):
            FlagDefinition.model_validate({"key": "", "type": "boolean"})

    def test_definition_ignores_bookkeeping(self):
        definition = FlagDefinition.model_validate({"key": "k", "type": "json", "version": 7, "createdBy": "x"})
        assert not hasattr(definition, "version")


class TestContext:
    def test_none_is_empty(self):
        assert parse_context(None) == {}

    def test_scalar_values(self):
        ctx = parse_context({"userId": "u1", "age": 30, "score": 0.5, "beta": True, "plan": None})
        assert ctx == {"userId": "u1", "age": 30, "score": 0.5, "beta": True, "plan": None}
        assert ctx["beta"] is True

    def test_nested_values_rejected(self):
        with pytest.raises(ValidationError):
            parse_context({"user": {"id": "u1"}})

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError):
            parse_context(["userId", "u1"])
