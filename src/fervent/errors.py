"""Exception taxonomy for fervent.

Validation failure is normally reported through a ValidationVerdict, not an
exception. ValidationFailed exists for callers that opt in to raising.
"""

from typing import Any


class FerventError(Exception):
    """Base class for all fervent errors."""


class ValidationFailed(FerventError):
    """Raised on request when a verdict is invalid. Carries the verdict."""

    def __init__(self, verdict):
        self.verdict = verdict
        fields = ", ".join(verdict.errors)
        super().__init__(f"Validation failed for: {fields}")

    @property
    def errors(self):
        """Field-keyed error messages of the failed verdict."""
        return self.verdict.errors


class UnresolvedRuleReference(FerventError):
    """A rule literal references something that could not be resolved."""

    def __init__(self, field: str, literal: str, reason: str):
        self.field = field
        self.literal = literal
        self.reason = reason
        super().__init__(f"Rule '{literal}' on '{field}' unresolved: {reason}")


class UnknownRuleError(FerventError):
    """No rule is registered under the given name."""

    def __init__(self, name: str, field: str | None = None):
        self.name = name
        self.field = field
        location = f" (field '{field}')" if field else ""
        super().__init__(f"Unknown validation rule: {name}{location}")


class RuleDefinitionError(FerventError):
    """Rule parameters are malformed."""

    def __init__(self, literal: str, detail: str):
        self.literal = literal
        self.detail = detail
        super().__init__(f"Invalid rule '{literal}': {detail}")


class CollaboratorError(FerventError):
    """A required collaborator is missing or unusable."""

    def __init__(self, collaborator: str, detail: str, context: dict[str, Any] | None = None):
        self.collaborator = collaborator
        self.detail = detail
        self.context = context or {}
        super().__init__(f"{collaborator}: {detail}")


class InvalidStateTransition(FerventError):
    """A validation run was moved between states it cannot connect."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition from {current.value} to {target.value}")


class SaveCancelled(FerventError):
    """A before-save hook vetoed the side effect."""

    def __init__(self, verdict):
        self.verdict = verdict
        super().__init__("Save cancelled by before_save hook")
