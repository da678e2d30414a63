"""Rule capability base class and the context handed to every rule."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sized
from dataclasses import dataclass
from typing import Any

from ..lookup import UniqueLookup


class SelfReference:
    """Parameter marker for the identifier of the record being updated."""

    def __repr__(self) -> str:
        return "SELF"


SELF = SelfReference()


@dataclass(frozen=True)
class RuleContext:
    """What a rule may see besides its own value."""
    field: str
    attributes: Mapping[str, Any]
    unique_lookup: UniqueLookup | None = None


def is_empty(value: Any) -> bool:
    """True for values a non-required rule should not look at."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Sized) and not isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    return False


class ValidationRule(ABC):
    """Base class for validation rules.

    Subclasses implement ``validate``. Parameter handling happens once, at
    resolve time, through ``split_params`` and ``parse_params``.
    """

    # Implicit rules also run on empty values
    implicit = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name used in literals and message keys."""
        pass

    @abstractmethod
    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        """Return True when ``value`` satisfies the rule."""
        pass

    def split_params(self, raw: str) -> tuple[str, ...]:
        return tuple(part.strip() for part in raw.split(","))

    def parse_params(self, params: tuple, literal: str) -> tuple:
        """Convert raw parameters; raise RuleDefinitionError when malformed."""
        return params

    def replacements(self, params: tuple) -> dict[str, str]:
        return {}

    def message(self, attribute: str, params: tuple, template: str) -> str:
        """Interpolate ``:attribute`` and rule placeholders into ``template``."""
        values = {"attribute": attribute, **self.replacements(params)}
        # Longest keys first so ":min" never clobbers ":minimum"
        for key in sorted(values, key=len, reverse=True):
            template = template.replace(f":{key}", str(values[key]))
        return template


class CallbackRule(ValidationRule):
    """Wraps a plain predicate ``func(value, params, context) -> bool``."""

    def __init__(self, func: Callable[[Any, tuple, RuleContext], bool],
                 name: str | None = None, implicit: bool = False):
        self._func = func
        self._name = name or getattr(func, "__name__", "callback")
        self.implicit = implicit

    @property
    def name(self) -> str:
        return self._name

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return bool(self._func(value, params, context))
