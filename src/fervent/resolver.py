"""RuleSet resolution: overlay merge, literal parsing, self-exclusion.

Resolution happens once per validation call, before any rule runs. The
result is a ResolvedRules mapping with no phase awareness left in it.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from .config import FerventConfig
from .errors import UnknownRuleError, UnresolvedRuleReference
from .models import BoundRule, LifecyclePhase, ResolvedRules, RuleList, RuleMap
from .rules.base import SELF, CallbackRule, ValidationRule
from .rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


class RuleSetResolver:
    """Produces the concrete rules for one lifecycle phase."""

    def __init__(self, registry: RuleRegistry | None = None,
                 self_placeholder: str = "{self}", strict_rules: bool = True):
        self.registry = registry or RuleRegistry.create_default()
        self.self_placeholder = self_placeholder
        self.strict_rules = strict_rules

    @classmethod
    def from_config(cls, config: FerventConfig,
                    registry: RuleRegistry | None = None) -> "RuleSetResolver":
        return cls(
            registry=registry,
            self_placeholder=config.resolver.self_placeholder,
            strict_rules=config.resolver.strict_rules,
        )

    def resolve(self, base_rules: RuleMap, phase_overlay: RuleMap | None = None,
                phase: LifecyclePhase = LifecyclePhase.CREATING,
                self_identifier: Any = None) -> ResolvedRules:
        """Resolve base rules plus a phase overlay into concrete rules.

        Args:
            base_rules: Field -> rules applying in every phase
            phase_overlay: Field -> rules replacing the base rules of that field
            phase: Lifecycle phase being validated
            self_identifier: Identifier of the record being updated

        Returns:
            ResolvedRules in field declaration order (base fields first)

        Raises:
            UnknownRuleError: unknown rule name while strict_rules is on
            RuleDefinitionError: malformed rule parameters
        """
        merged: dict[str, RuleList] = dict(base_rules)
        for field_name, rules in (phase_overlay or {}).items():
            merged[field_name] = rules

        resolved: dict[str, list[BoundRule]] = {}
        for field_name, rules in merged.items():
            bound_rules = []
            for entry in self._entries(rules):
                bound = self._bind(field_name, entry)
                if bound is None:
                    continue
                try:
                    bound = self._substitute(field_name, bound, phase, self_identifier)
                except UnresolvedRuleReference as e:
                    logger.warning(f"Skipping rule: {e}")
                    continue
                bound_rules.append(bound)
            resolved[field_name] = bound_rules

        logger.debug(f"Resolved rules for {len(resolved)} fields ({phase.value})")
        return ResolvedRules(resolved)

    def _entries(self, rules: RuleList) -> Iterable:
        # Pipe strings cannot carry a regex containing "|"; use a list for those
        if isinstance(rules, str):
            rules = rules.split("|")
        for entry in rules:
            if isinstance(entry, str):
                if entry.strip():
                    yield entry
            else:
                yield entry

    def _bind(self, field_name: str, entry: Any) -> BoundRule | None:
        if isinstance(entry, BoundRule):
            return entry
        if isinstance(entry, ValidationRule):
            return BoundRule(entry, (), entry.name)
        if callable(entry):
            rule = CallbackRule(entry)
            return BoundRule(rule, (), rule.name)
        try:
            return self.registry.parse(entry, field_name, self.self_placeholder)
        except UnknownRuleError:
            if self.strict_rules:
                raise
            logger.warning(f"Skipping unknown rule '{entry}' on '{field_name}'")
            return None

    def _substitute(self, field_name: str, bound: BoundRule,
                    phase: LifecyclePhase, self_identifier: Any) -> BoundRule:
        if not any(p is SELF for p in bound.params):
            return bound
        if self_identifier is not None:
            replacement = self_identifier
        elif phase == LifecyclePhase.UPDATING:
            raise UnresolvedRuleReference(
                field_name, bound.literal, "no self identifier supplied while updating"
            )
        else:
            # A record being created cannot collide with itself
            replacement = None
        params = tuple(replacement if p is SELF else p for p in bound.params)
        return replace(bound, params=params)


def resolve(base_rules: RuleMap, phase_overlay: RuleMap | None = None,
            phase: LifecyclePhase = LifecyclePhase.CREATING,
            self_identifier: Any = None) -> ResolvedRules:
    """Resolve with the default registry and placeholder."""
    return RuleSetResolver().resolve(base_rules, phase_overlay, phase, self_identifier)
