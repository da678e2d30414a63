"""Built-in validation rules."""

import ipaddress
import logging
import math
import re
import uuid
from collections.abc import Mapping, Sized
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

from ..errors import CollaboratorError, RuleDefinitionError
from .base import SELF, RuleContext, ValidationRule, is_empty

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
BOUNDS_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*-\s*(-?\d+(?:\.\d+)?)\s*$")


def to_number(value: Any) -> int | float | Decimal | None:
    """Numeric value of ``value``, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        if INTEGER_PATTERN.match(text):
            return int(text)
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def size_of(value: Any) -> int | float | Decimal | None:
    """Numbers measure by value, strings and collections by length."""
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return value
    if isinstance(value, Sized):
        return len(value)
    return None


def _number_param(literal: str, raw: Any) -> int | float:
    number = to_number(raw)
    if number is None:
        raise RuleDefinitionError(literal, f"expected a number, got '{raw}'")
    return number


def _bounds(literal: str, params: tuple) -> tuple:
    if len(params) != 2:
        raise RuleDefinitionError(literal, "expected bounds as 'lo-hi' or 'lo,hi'")
    low, high = (_number_param(literal, p) for p in params)
    if low > high:
        raise RuleDefinitionError(literal, f"lower bound {low} exceeds upper bound {high}")
    return low, high


def _reject_self(literal: str, params: tuple) -> None:
    if any(p is SELF for p in params):
        raise RuleDefinitionError(literal, "self reference is only supported by unique")


def _split_bounds(raw: str) -> tuple[str, ...]:
    match = BOUNDS_PATTERN.match(raw)
    if match:
        return match.group(1), match.group(2)
    return tuple(part.strip() for part in raw.split(","))


class RequiredRule(ValidationRule):
    """Value must be present and non-empty."""

    implicit = True

    @property
    def name(self) -> str:
        return "required"

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return not is_empty(value)


class TypeRule(ValidationRule):
    """Value must be of a named Python type."""

    CHECKS = {
        "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
        "float": lambda v: isinstance(v, float),
        "number": lambda v: isinstance(v, (int, float, Decimal)) and not isinstance(v, bool),
        "str": lambda v: isinstance(v, str),
        "bool": lambda v: isinstance(v, bool),
        "list": lambda v: isinstance(v, (list, tuple)),
        "dict": lambda v: isinstance(v, Mapping),
    }

    @property
    def name(self) -> str:
        return "type"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        if len(params) != 1 or params[0] not in self.CHECKS:
            raise RuleDefinitionError(literal, f"type must be one of {sorted(self.CHECKS)}")
        return params

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return self.CHECKS[params[0]](value)

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"type": params[0]}


def _is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https", "ftp") and bool(parsed.netloc)


def _is_uuid(value: Any) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _is_date(value: Any) -> bool:
    if isinstance(value, date):
        return True
    try:
        date.fromisoformat(str(value))
    except ValueError:
        return False
    return True


def _is_datetime(value: Any) -> bool:
    if isinstance(value, datetime):
        return True
    try:
        datetime.fromisoformat(str(value))
    except ValueError:
        return False
    return True


def _is_ip(value: Any) -> bool:
    if not isinstance(value, (str, ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(INTEGER_PATTERN.match(value.strip()))


class FormatRule(ValidationRule):
    """Value must match a well-known textual format."""

    CHECKS = {
        "email": _is_email,
        "url": _is_url,
        "uuid": _is_uuid,
        "date": _is_date,
        "datetime": _is_datetime,
        "ip": _is_ip,
        "numeric": lambda v: to_number(v) is not None,
        "integer": _is_integer,
        "alpha": lambda v: isinstance(v, str) and v.isalpha(),
        "alpha_num": lambda v: isinstance(v, str) and v.isalnum(),
        "slug": lambda v: isinstance(v, str) and bool(SLUG_PATTERN.match(v)),
    }

    @property
    def name(self) -> str:
        return "format"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        if len(params) != 1 or params[0] not in self.CHECKS:
            raise RuleDefinitionError(literal, f"format must be one of {sorted(self.CHECKS)}")
        return params

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return self.CHECKS[params[0]](value)

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"format": params[0].replace("_", " ")}


class RangeRule(ValidationRule):
    """Numeric value within inclusive bounds: ``range:0-150``."""

    @property
    def name(self) -> str:
        return "range"

    def split_params(self, raw: str) -> tuple[str, ...]:
        return _split_bounds(raw)

    def parse_params(self, params: tuple, literal: str) -> tuple:
        return _bounds(literal, params)

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        number = to_number(value)
        return number is not None and params[0] <= number <= params[1]

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"min": params[0], "max": params[1]}


class MinRule(ValidationRule):
    """Size at least ``n``."""

    @property
    def name(self) -> str:
        return "min"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        if len(params) != 1:
            raise RuleDefinitionError(literal, "expected exactly one bound")
        return (_number_param(literal, params[0]),)

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        size = size_of(value)
        return size is not None and size >= params[0]

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"min": params[0]}


class MaxRule(MinRule):
    """Size at most ``n``."""

    @property
    def name(self) -> str:
        return "max"

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        size = size_of(value)
        return size is not None and size <= params[0]

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"max": params[0]}


class LengthRule(ValidationRule):
    """String or collection length within inclusive bounds: ``length:3-20``."""

    @property
    def name(self) -> str:
        return "length"

    def split_params(self, raw: str) -> tuple[str, ...]:
        return _split_bounds(raw)

    def parse_params(self, params: tuple, literal: str) -> tuple:
        return _bounds(literal, params)

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        if not isinstance(value, Sized):
            return False
        return params[0] <= len(value) <= params[1]

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"min": params[0], "max": params[1]}


class RegexRule(ValidationRule):
    """String value matching a pattern. Everything after the colon is the pattern."""

    @property
    def name(self) -> str:
        return "regex"

    def split_params(self, raw: str) -> tuple[str, ...]:
        return (raw,)

    def parse_params(self, params: tuple, literal: str) -> tuple:
        _reject_self(literal, params)
        try:
            return (re.compile(params[0]),)
        except re.error as e:
            raise RuleDefinitionError(literal, f"bad pattern: {e}")

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            return False
        return params[0].search(str(value)) is not None


class InRule(ValidationRule):
    """Value is one of the listed options."""

    @property
    def name(self) -> str:
        return "in"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        _reject_self(literal, params)
        if not params or not all(params):
            raise RuleDefinitionError(literal, "expected a list of options")
        return params

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return str(value) in params

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"values": ", ".join(params)}


class NotInRule(InRule):
    """Value is none of the listed options."""

    @property
    def name(self) -> str:
        return "not_in"

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return str(value) not in params


class SameRule(ValidationRule):
    """Value equals another field's value."""

    @property
    def name(self) -> str:
        return "same"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        _reject_self(literal, params)
        if len(params) != 1 or not params[0]:
            raise RuleDefinitionError(literal, "expected the other field's name")
        return params

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return value == context.attributes.get(params[0])

    def replacements(self, params: tuple) -> dict[str, str]:
        return {"other": params[0].replace("_", " ")}


class DifferentRule(SameRule):
    """Value differs from another field's value."""

    @property
    def name(self) -> str:
        return "different"

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return value != context.attributes.get(params[0])


class ConfirmedRule(ValidationRule):
    """Value equals ``<field>_confirmation``."""

    @property
    def name(self) -> str:
        return "confirmed"

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        return value == context.attributes.get(f"{context.field}_confirmation")


class UniqueRule(ValidationRule):
    """Value not already taken, per the injected uniqueness lookup.

    ``unique``, ``unique:column``, ``unique:{self}`` or ``unique:column,{self}``.
    Parsed parameters are always ``(column, excluding)``.
    """

    @property
    def name(self) -> str:
        return "unique"

    def parse_params(self, params: tuple, literal: str) -> tuple:
        columns = [p for p in params if p is not SELF]
        if len(columns) > 1 or len(params) > 2:
            raise RuleDefinitionError(literal, "expected at most a column and a self reference")
        column = columns[0] if columns and columns[0] else None
        excluding = SELF if any(p is SELF for p in params) else None
        return column, excluding

    def validate(self, value: Any, params: tuple, context: RuleContext) -> bool:
        lookup = context.unique_lookup
        if lookup is None:
            raise CollaboratorError(
                "unique_lookup",
                "a unique rule ran but no uniqueness lookup was provided",
                {"field": context.field},
            )
        column, excluding = params
        column = column or context.field
        logger.debug(f"Checking uniqueness of {column} (excluding {excluding!r})")
        return not lookup.exists(column, value, excluding)


BUILTIN_RULES = (
    RequiredRule,
    TypeRule,
    FormatRule,
    RangeRule,
    MinRule,
    MaxRule,
    LengthRule,
    RegexRule,
    InRule,
    NotInRule,
    SameRule,
    DifferentRule,
    ConfirmedRule,
    UniqueRule,
)

# Shorthand literals: alias -> (rule name, fixed leading params)
BUILTIN_ALIASES = {
    "email": ("format", ("email",)),
    "url": ("format", ("url",)),
    "uuid": ("format", ("uuid",)),
    "date": ("format", ("date",)),
    "ip": ("format", ("ip",)),
    "numeric": ("format", ("numeric",)),
    "integer": ("format", ("integer",)),
    "alpha": ("format", ("alpha",)),
    "alpha_num": ("format", ("alpha_num",)),
    "between": ("range", ()),
}
