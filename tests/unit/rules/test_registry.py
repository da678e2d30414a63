"""Tests for the rule registry."""

import pytest

from fervent.errors import UnknownRuleError
from fervent.rules import SELF, RequiredRule, RuleRegistry, ValidationRule


class ShoutingRule(ValidationRule):
    """Accepts upper-case strings only."""

    @property
    def name(self):
        return "shouting"

    def validate(self, value, params, context):
        return isinstance(value, str) and value.isupper()


class TestRuleRegistry:
    """Test RuleRegistry."""

    def test_default_registry_has_builtins(self):
        registry = RuleRegistry.create_default()

        for name in ["required", "format", "range", "unique", "regex", "same", "email", "between"]:
            assert name in registry

    def test_parse_literal(self):
        bound = RuleRegistry.create_default().parse(" range:0-150 ")

        assert bound.literal == "range:0-150"
        assert bound.name == "range"
        assert bound.params == (0, 150)

    def test_alias_keeps_its_name(self):
        bound = RuleRegistry.create_default().parse("email")

        assert bound.name == "email"
        assert bound.rule.name == "format"
        assert bound.params == ("email",)

    def test_placeholder_becomes_self_marker(self):
        bound = RuleRegistry.create_default().parse("unique:{self}")
        assert bound.params == (None, SELF)

    def test_unknown_rule(self):
        with pytest.raises(UnknownRuleError):
            RuleRegistry.create_default().parse("nope", "field")

    def test_register_custom_rule(self):
        registry = RuleRegistry()
        registry.register(ShoutingRule())
        registry.alias("loud", "shouting")

        assert registry.get("loud").name == "shouting"
        assert registry.names() == ["loud", "shouting"]

    def test_alias_to_unknown_target(self):
        registry = RuleRegistry()
        with pytest.raises(UnknownRuleError):
            registry.alias("must", "required")

    def test_register_replaces(self):
        registry = RuleRegistry()
        first, second = RequiredRule(), RequiredRule()
        registry.register(first)
        registry.register(second)

        assert registry.get("required") is second
