"""Data model for rule sets, resolved rules, verdicts and gate results."""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

from .errors import InvalidStateTransition, SaveCancelled, ValidationFailed

if TYPE_CHECKING:
    from .resolver import RuleSetResolver
    from .rules.base import ValidationRule

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A field's rules: "required|format:email", or a list of literals and rule objects
RuleList = Union[str, Sequence[Union[str, "ValidationRule"]]]
RuleMap = Mapping[str, RuleList]


class LifecyclePhase(str, Enum):
    """Lifecycle point a validation runs for."""
    CREATING = "creating"
    UPDATING = "updating"


@dataclass(frozen=True)
class RuleSet:
    """Static rule definition owned by an entity type.

    ``rules`` apply in every phase. A field present in the overlay for the
    current phase replaces its base rules entirely.
    """
    rules: RuleMap = field(default_factory=dict)
    rules_for_create: RuleMap = field(default_factory=dict)
    rules_for_update: RuleMap = field(default_factory=dict)

    def overlay_for(self, phase: LifecyclePhase) -> RuleMap:
        """Overlay applying to phase."""
        if phase == LifecyclePhase.UPDATING:
            return self.rules_for_update
        return self.rules_for_create

    def resolve(self, phase: LifecyclePhase = LifecyclePhase.CREATING,
                self_identifier: Any = None,
                resolver: "RuleSetResolver | None" = None) -> "ResolvedRules":
        """Resolve this rule set for a phase."""
        if resolver is None:
            from .resolver import RuleSetResolver
            resolver = RuleSetResolver()
        return resolver.resolve(self.rules, self.overlay_for(phase), phase, self_identifier)


@dataclass(frozen=True)
class BoundRule:
    """A rule object bound to concrete parameters."""
    rule: "ValidationRule"
    params: tuple = ()
    literal: str = ""

    @property
    def name(self) -> str:
        """Key the rule was declared under; an alias keeps its own name."""
        if self.literal:
            return self.literal.partition(":")[0].strip()
        return self.rule.name

    @property
    def implicit(self) -> bool:
        return self.rule.implicit

    def passes(self, value: Any, context: Any) -> bool:
        return self.rule.validate(value, self.params, context)

    def __str__(self) -> str:
        return self.literal or self.name


class ResolvedRules(Mapping):
    """Immutable, ordered field -> bound rules mapping for one phase."""

    def __init__(self, rules: Mapping[str, Iterable[BoundRule]] | None = None):
        self._rules = {name: tuple(bound) for name, bound in (rules or {}).items()}

    def __getitem__(self, key: str) -> tuple[BoundRule, ...]:
        return self._rules[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"ResolvedRules({self.literals()!r})"

    def literals(self) -> dict[str, list[str]]:
        """Rule literals per field, in declaration order."""
        return {name: [str(bound) for bound in rules] for name, rules in self._rules.items()}


@dataclass(frozen=True)
class ValidationVerdict:
    """Pass/fail result of one validation call plus field-keyed messages."""
    valid: bool
    errors: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {name: tuple(messages) for name, messages in self.errors.items()}
        empty = [name for name, messages in frozen.items() if not messages]
        if empty:
            raise ValueError(f"Error entries without messages: {', '.join(empty)}")
        if self.valid and frozen:
            raise ValueError("A valid verdict cannot carry errors")
        if not self.valid and not frozen:
            raise ValueError("An invalid verdict must carry at least one error")
        object.__setattr__(self, "errors", MappingProxyType(frozen))

    def __hash__(self) -> int:
        return hash((self.valid, tuple(self.errors.items())))

    @classmethod
    def from_errors(cls, errors: Mapping[str, Sequence[str]]) -> "ValidationVerdict":
        """Verdict that is valid exactly when errors is empty."""
        return cls(valid=not errors, errors=errors)

    @classmethod
    def passed(cls) -> "ValidationVerdict":
        """A valid verdict with no errors."""
        return cls(valid=True)

    def has(self, name: str) -> bool:
        """Whether name has any error."""
        return name in self.errors

    def first(self, name: str) -> str | None:
        """First message for name, or None."""
        messages = self.errors.get(name)
        return messages[0] if messages else None

    def get(self, name: str) -> tuple[str, ...]:
        """Messages for name; empty when it passed."""
        return self.errors.get(name, ())

    def all(self) -> list[str]:
        """Every message, in field order."""
        return [message for messages in self.errors.values() for message in messages]

    def count(self) -> int:
        """Total number of messages."""
        return sum(len(messages) for messages in self.errors.values())

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "errors": {name: list(messages) for name, messages in self.errors.items()},
        }

    def raise_if_invalid(self) -> "ValidationVerdict":
        """Raise ValidationFailed unless valid; return self otherwise."""
        if not self.valid:
            raise ValidationFailed(self)
        return self


@dataclass(frozen=True)
class GateResult(Generic[T]):
    """Outcome of a gated side effect.

    ``ran`` tells whether the side effect was invoked. ``forced`` marks a run
    that went ahead only because the gate was skipped; ``ok`` stays False then.
    """
    verdict: ValidationVerdict
    value: T | None = None
    ran: bool = False
    forced: bool = False
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """Side effect ran on a valid verdict."""
        return self.ran and self.verdict.valid

    def unwrap(self) -> T | None:
        """Return the side effect's value, or raise why it is missing."""
        if self.cancelled:
            raise SaveCancelled(self.verdict)
        if not self.ran:
            raise ValidationFailed(self.verdict)
        return self.value


class ValidationState(str, Enum):
    """States of a single validation call."""
    IDLE = "idle"
    RESOLVING = "resolving"
    EXECUTING = "executing"
    PASSED = "passed"
    FAILED = "failed"


_TRANSITIONS = {
    ValidationState.IDLE: {ValidationState.RESOLVING},
    ValidationState.RESOLVING: {ValidationState.EXECUTING},
    ValidationState.EXECUTING: {ValidationState.PASSED, ValidationState.FAILED},
    ValidationState.PASSED: set(),
    ValidationState.FAILED: set(),
}


@dataclass
class ValidationRun:
    """Tracks one validation call through its states. Not reused across calls."""
    phase: LifecyclePhase
    state: ValidationState = ValidationState.IDLE
    history: list[ValidationState] = field(default_factory=list)

    @property
    def terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def advance(self, target: ValidationState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(self.state, target)
        logger.debug(f"Validation run ({self.phase.value}): {self.state.value} -> {target.value}")
        self.history.append(self.state)
        self.state = target

    def finish(self, verdict: ValidationVerdict) -> ValidationVerdict:
        self.advance(ValidationState.PASSED if verdict.valid else ValidationState.FAILED)
        return verdict
