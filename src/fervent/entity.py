"""Entity-level validation by explicit composition.

An entity type owns a RuleSet and an EntityValidator; it calls ``validate`` or
``save`` at the lifecycle points it chooses. Nothing is injected into a model
base class.

Example::

    class User:
        rules = RuleSet(
            rules={"email": ["required", "email", "unique:{self}"]},
            rules_for_create={"password": "required|length:8-64|confirmed"},
        )
        validator = EntityValidator(rules, unique_lookup=UserLookup())

    User.validator.save(form, repository.insert)
    User.validator.save(form, lambda attrs: repository.update(42, attrs),
                        LifecyclePhase.UPDATING, self_identifier=42)
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .config import FerventConfig
from .engine import ValidationEngine
from .errors import ValidationFailed
from .lookup import UniqueLookup
from .models import GateResult, LifecyclePhase, RuleSet, ValidationRun, ValidationState, ValidationVerdict

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIRMATION_SUFFIX = "_confirmation"


def purge_redundant_attributes(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Drop confirmation fields and underscore-prefixed fields."""
    return {
        key: value
        for key, value in attributes.items()
        if not key.endswith(CONFIRMATION_SUFFIX) and not key.startswith("_")
    }


class EntityValidator:
    """Validation and save gating for one entity type.

    An explicit ``engine`` brings its own lookup, messages and resolver; only
    the gate settings of ``config`` apply then, and passing ``unique_lookup``
    as well is rejected.
    """

    def __init__(self, rule_set: RuleSet,
                 engine: ValidationEngine | None = None,
                 config: FerventConfig | None = None,
                 unique_lookup: UniqueLookup | None = None,
                 before_save: Callable[[Mapping[str, Any]], Any] | None = None,
                 after_save: Callable[[Mapping[str, Any], Any], None] | None = None):
        if engine is not None and unique_lookup is not None:
            raise ValueError("Pass unique_lookup to the engine, not alongside it")
        self.rule_set = rule_set
        self.config = config or FerventConfig()
        self.engine = engine or ValidationEngine.from_config(self.config, unique_lookup=unique_lookup)
        self.before_save = before_save
        self.after_save = after_save

    def validate(self, attributes: Mapping[str, Any],
                 phase: LifecyclePhase = LifecyclePhase.CREATING,
                 self_identifier: Any = None) -> ValidationVerdict:
        """Validate for a phase; raises ValidationFailed if configured to throw."""
        verdict = self._run(attributes, phase, self_identifier)
        if not verdict.valid and self.config.gate.throw_on_validation:
            raise ValidationFailed(verdict)
        return verdict

    def save(self, attributes: Mapping[str, Any],
             persist: Callable[[dict[str, Any]], T],
             phase: LifecyclePhase = LifecyclePhase.CREATING,
             self_identifier: Any = None,
             force: bool | None = None) -> GateResult[T]:
        """Validate, run hooks and call ``persist`` when allowed.

        ``persist`` receives a copy of the attributes, purged of redundant
        fields when that is configured. A ``before_save`` hook returning False
        cancels the save. ``force`` defaults to the configured force_save.
        """
        if force is None:
            force = self.config.gate.force_save

        verdict = self._run(attributes, phase, self_identifier)
        if not verdict.valid and not force:
            if self.config.gate.throw_on_validation:
                raise ValidationFailed(verdict)
            return GateResult(verdict=verdict)

        if self.before_save is not None and self.before_save(attributes) is False:
            logger.info("Save cancelled by before_save hook")
            return GateResult(verdict=verdict, forced=force and not verdict.valid, cancelled=True)

        if self.config.gate.auto_purge_redundant_attributes:
            payload = purge_redundant_attributes(attributes)
        else:
            payload = dict(attributes)

        result = self.engine.run_gated(verdict, lambda: persist(payload), force)
        if result.ran and self.after_save is not None:
            self.after_save(attributes, result.value)
        return result

    def _run(self, attributes: Mapping[str, Any], phase: LifecyclePhase,
             self_identifier: Any) -> ValidationVerdict:
        run = ValidationRun(phase)
        run.advance(ValidationState.RESOLVING)
        resolved = self.rule_set.resolve(phase, self_identifier, resolver=self.engine.resolver)
        run.advance(ValidationState.EXECUTING)
        return run.finish(self.engine.validate(attributes, resolved))
