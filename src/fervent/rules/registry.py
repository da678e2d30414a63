"""Rule registry: turns rule literals into bound rule objects."""

import logging

from ..errors import UnknownRuleError
from ..models import BoundRule
from .base import SELF, ValidationRule

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Name -> rule lookup plus literal parsing."""

    def __init__(self):
        self._rules: dict[str, ValidationRule] = {}
        self._aliases: dict[str, tuple[str, tuple[str, ...]]] = {}

    def register(self, rule: ValidationRule) -> None:
        """Register a rule under its name, replacing any previous one."""
        if rule.name in self._rules:
            logger.debug(f"Replacing registered rule: {rule.name}")
        self._rules[rule.name] = rule

    def alias(self, alias: str, target: str, params: tuple[str, ...] = ()) -> None:
        """Make ``alias`` mean ``target`` with ``params`` prepended."""
        if target not in self._rules:
            raise UnknownRuleError(target)
        self._aliases[alias] = (target, tuple(params))

    def names(self) -> list[str]:
        return sorted([*self._rules, *self._aliases])

    def __contains__(self, name: str) -> bool:
        return name in self._rules or name in self._aliases

    def get(self, name: str) -> ValidationRule:
        if name in self._aliases:
            name = self._aliases[name][0]
        if name not in self._rules:
            raise UnknownRuleError(name)
        return self._rules[name]

    def parse(self, literal: str, field: str | None = None,
              placeholder: str = "{self}") -> BoundRule:
        """Parse ``name`` or ``name:p1,p2`` into a BoundRule.

        Parameters equal to ``placeholder`` become the SELF marker.

        Raises:
            UnknownRuleError: no rule or alias with that name
            RuleDefinitionError: parameters rejected by the rule
        """
        literal = literal.strip()
        name, _, raw = literal.partition(":")
        name = name.strip()

        fixed: tuple[str, ...] = ()
        if name in self._aliases:
            target, fixed = self._aliases[name]
            rule = self._rules[target]
        elif name in self._rules:
            rule = self._rules[name]
        else:
            raise UnknownRuleError(name, field)

        params = fixed + (rule.split_params(raw) if raw else ())
        params = tuple(SELF if p == placeholder else p for p in params)
        return BoundRule(rule, rule.parse_params(params, literal), literal)

    @classmethod
    def create_default(cls) -> "RuleRegistry":
        """Registry holding every built-in rule and alias."""
        from .builtin import BUILTIN_ALIASES, BUILTIN_RULES

        registry = cls()
        for rule_class in BUILTIN_RULES:
            registry.register(rule_class())
        for alias, (target, params) in BUILTIN_ALIASES.items():
            registry.alias(alias, target, params)
        return registry
