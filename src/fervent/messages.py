"""Error message selection and interpolation.

A failing rule's message comes from, in order: a custom message keyed
``field.rule`` or ``rule``, the translator's template for the rule, or the
raw declared rule literal.
"""

from collections.abc import Mapping

from .lookup import Translator
from .models import BoundRule

ENGLISH_TEMPLATES = {
    "required": "The :attribute field is required.",
    "type": "The :attribute must be of type :type.",
    "format": "The :attribute must be a valid :format.",
    "email": "The :attribute must be a valid email address.",
    "url": "The :attribute format is invalid.",
    "uuid": "The :attribute must be a valid UUID.",
    "date": "The :attribute is not a valid date.",
    "ip": "The :attribute must be a valid IP address.",
    "numeric": "The :attribute must be a number.",
    "integer": "The :attribute must be an integer.",
    "alpha": "The :attribute may only contain letters.",
    "alpha_num": "The :attribute may only contain letters and numbers.",
    "range": "The :attribute must be between :min and :max.",
    "between": "The :attribute must be between :min and :max.",
    "min": "The :attribute must be at least :min.",
    "max": "The :attribute may not be greater than :max.",
    "length": "The :attribute must be between :min and :max characters.",
    "regex": "The :attribute format is invalid.",
    "in": "The selected :attribute is invalid.",
    "not_in": "The selected :attribute is invalid.",
    "same": "The :attribute and :other must match.",
    "different": "The :attribute and :other must be different.",
    "confirmed": "The :attribute confirmation does not match.",
    "unique": "The :attribute has already been taken.",
}


class EnglishTemplates:
    """Translator serving the stock English templates."""

    def __init__(self, overrides: Mapping[str, str] | None = None):
        self.templates = {**ENGLISH_TEMPLATES, **(overrides or {})}

    def get(self, key: str) -> str | None:
        """Template for a rule key, or None."""
        return self.templates.get(key)


class MessageFormatter:
    """Builds the message for a failed rule."""

    def __init__(self, translator: Translator | None = None,
                 custom_messages: Mapping[str, str] | None = None,
                 attribute_names: Mapping[str, str] | None = None):
        self.translator = translator
        self.custom_messages = dict(custom_messages or {})
        self.attribute_names = dict(attribute_names or {})

    def attribute(self, field: str) -> str:
        """Display name for a field."""
        return self.attribute_names.get(field, field.replace("_", " "))

    def template_for(self, field: str, bound: BoundRule) -> str | None:
        """Custom message for the field, then for the rule, then the translator's."""
        template = self.custom_messages.get(f"{field}.{bound.name}")
        if template is None:
            template = self.custom_messages.get(bound.name)
        if template is None and self.translator is not None:
            template = self.translator.get(bound.name)
        return template

    def format(self, field: str, bound: BoundRule) -> str:
        """Message for bound failing on field; the raw literal without a template."""
        template = self.template_for(field, bound)
        if template is None:
            return str(bound)
        return bound.rule.message(self.attribute(field), bound.params, template)
