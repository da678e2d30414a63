"""fervent - declarative validation rules with lifecycle-gated enforcement.

Entities declare field rules once, resolve them for a create or update, and
gate persistence on the resulting verdict.
"""

__version__ = "0.1.0"
__description__ = "Declarative validation rules with lifecycle-gated enforcement"

from fervent.config import FerventConfig, configure_logging, load_config
from fervent.engine import ValidationEngine
from fervent.entity import EntityValidator, purge_redundant_attributes
from fervent.errors import (
    CollaboratorError,
    FerventError,
    InvalidStateTransition,
    RuleDefinitionError,
    SaveCancelled,
    UnknownRuleError,
    UnresolvedRuleReference,
    ValidationFailed,
)
from fervent.lookup import Translator, UniqueLookup
from fervent.messages import EnglishTemplates, MessageFormatter
from fervent.models import (
    BoundRule,
    GateResult,
    LifecyclePhase,
    ResolvedRules,
    RuleSet,
    ValidationRun,
    ValidationState,
    ValidationVerdict,
)
from fervent.resolver import RuleSetResolver, resolve
from fervent.rules import RuleRegistry, ValidationRule

__all__ = [
    "__version__",
    "__description__",
    "FerventConfig",
    "configure_logging",
    "load_config",
    "ValidationEngine",
    "EntityValidator",
    "purge_redundant_attributes",
    "FerventError",
    "ValidationFailed",
    "UnresolvedRuleReference",
    "UnknownRuleError",
    "RuleDefinitionError",
    "CollaboratorError",
    "InvalidStateTransition",
    "SaveCancelled",
    "UniqueLookup",
    "Translator",
    "EnglishTemplates",
    "MessageFormatter",
    "BoundRule",
    "GateResult",
    "LifecyclePhase",
    "ResolvedRules",
    "RuleSet",
    "ValidationRun",
    "ValidationState",
    "ValidationVerdict",
    "RuleSetResolver",
    "resolve",
    "RuleRegistry",
    "ValidationRule",
]
