"""Validation rules: capability base class, registry and built-ins."""

from .base import SELF, CallbackRule, RuleContext, ValidationRule, is_empty
from .builtin import (
    ConfirmedRule,
    DifferentRule,
    FormatRule,
    InRule,
    LengthRule,
    MaxRule,
    MinRule,
    NotInRule,
    RangeRule,
    RegexRule,
    RequiredRule,
    SameRule,
    TypeRule,
    UniqueRule,
)
from .registry import RuleRegistry

__all__ = [
    "SELF",
    "CallbackRule",
    "RuleContext",
    "ValidationRule",
    "is_empty",
    "RuleRegistry",
    "RequiredRule",
    "TypeRule",
    "FormatRule",
    "RangeRule",
    "MinRule",
    "MaxRule",
    "LengthRule",
    "RegexRule",
    "InRule",
    "NotInRule",
    "SameRule",
    "DifferentRule",
    "ConfirmedRule",
    "UniqueRule",
]
