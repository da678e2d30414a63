"""Validation engine: runs resolved rules and gates side effects on the verdict."""

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, TypeVar

from .config import FerventConfig, MessageTemplates
from .errors import ValidationFailed
from .lookup import Translator, UniqueLookup
from .messages import EnglishTemplates, MessageFormatter
from .models import GateResult, LifecyclePhase, ResolvedRules, RuleMap, RuleSet, ValidationVerdict
from .resolver import RuleSetResolver
from .rules.base import RuleContext, is_empty

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ValidationEngine:
    """Executes rules against an attribute set and reports a verdict.

    The engine holds collaborators only; it keeps no state between calls.
    """

    def __init__(self, unique_lookup: UniqueLookup | None = None,
                 translator: Translator | None = None,
                 custom_messages: Mapping[str, str] | None = None,
                 attribute_names: Mapping[str, str] | None = None,
                 resolver: RuleSetResolver | None = None):
        self.unique_lookup = unique_lookup
        self.formatter = MessageFormatter(translator, custom_messages, attribute_names)
        self.resolver = resolver or RuleSetResolver()

    @classmethod
    def from_config(cls, config: FerventConfig,
                    unique_lookup: UniqueLookup | None = None,
                    translator: Translator | None = None) -> "ValidationEngine":
        """Build an engine from configuration; an explicit translator wins."""
        if translator is None and config.messages.templates == MessageTemplates.ENGLISH.value:
            translator = EnglishTemplates()
        return cls(
            unique_lookup=unique_lookup,
            translator=translator,
            custom_messages=config.messages.custom,
            attribute_names=config.messages.attribute_names,
            resolver=RuleSetResolver.from_config(config),
        )

    def validate(self, attributes: Mapping[str, Any],
                 rules: ResolvedRules | RuleSet | RuleMap) -> ValidationVerdict:
        """Validate ``attributes`` against ``rules``.

        Each field stops at its first failing rule; every field is checked.
        Unresolved rules are resolved for the creating phase first.
        """
        resolved = self._ensure_resolved(rules)
        view = MappingProxyType(attributes)
        errors: dict[str, list[str]] = {}

        for field_name, bound_rules in resolved.items():
            value = attributes.get(field_name)
            context = RuleContext(field_name, view, self.unique_lookup)
            for bound in bound_rules:
                if not bound.implicit and is_empty(value):
                    continue
                if not bound.passes(value, context):
                    errors[field_name] = [self.formatter.format(field_name, bound)]
                    logger.debug(f"Field '{field_name}' failed rule '{bound}'")
                    break

        verdict = ValidationVerdict.from_errors(errors)
        logger.debug(f"Validated {len(resolved)} fields: {'passed' if verdict.valid else 'failed'}")
        return verdict

    def validate_or_raise(self, attributes: Mapping[str, Any],
                          rules: ResolvedRules | RuleSet | RuleMap) -> ValidationVerdict:
        """Like ``validate`` but raises ValidationFailed on an invalid verdict."""
        verdict = self.validate(attributes, rules)
        if not verdict.valid:
            raise ValidationFailed(verdict)
        return verdict

    def validate_and_run(self, attributes: Mapping[str, Any],
                         rules: ResolvedRules | RuleSet | RuleMap,
                         side_effect: Callable[[], T],
                         force: bool = False) -> GateResult[T]:
        """Validate, then run ``side_effect`` only if the verdict is valid.

        With ``force`` the side effect runs regardless and the real verdict is
        still returned.
        """
        verdict = self.validate(attributes, rules)
        return self.run_gated(verdict, side_effect, force)

    def run_gated(self, verdict: ValidationVerdict, side_effect: Callable[[], T],
                  force: bool = False) -> GateResult[T]:
        """Apply the gate to an existing verdict."""
        if not verdict.valid and not force:
            logger.debug(f"Side effect blocked: {verdict.count()} validation errors")
            return GateResult(verdict=verdict)
        if not verdict.valid:
            logger.info(f"Forcing side effect despite {verdict.count()} validation errors")
        value = side_effect()
        return GateResult(verdict=verdict, value=value, ran=True, forced=force and not verdict.valid)

    def _ensure_resolved(self, rules: ResolvedRules | RuleSet | RuleMap) -> ResolvedRules:
        if isinstance(rules, ResolvedRules):
            return rules
        if isinstance(rules, RuleSet):
            return rules.resolve(LifecyclePhase.CREATING, resolver=self.resolver)
        return self.resolver.resolve(rules, None, LifecyclePhase.CREATING)
