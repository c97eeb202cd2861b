"""
CRUD Services - Declarative resource scaffolding.

Provides:
- ResourceDefinition / DependencyDescriptor: Static resource declarations
- ControllerConfig: View, list options, response shapes and rule sets
- ResourceController: list / fetch / create / update / destroy
- Rule composition: compose_rules, build_rule_set, rule variants
- Validator: Rule evaluation with presence verification
- DependencyGuard: Pre-delete referential checks (soft delete aware)
- Repository contract and its SQLAlchemy implementation
- Upload sinks and presenters
"""

from .definition import ResourceDefinition, DependencyDescriptor
from .config import ControllerConfig, ListOptions, ResponseShape, ReturnOn, RuleSets, default_return_on
from .rules import (
    StaticRule,
    UniqueRule,
    ExistsRule,
    Rule,
    RuleInput,
    parse_rule,
    normalize_rules,
    compose_rules,
    build_rule_set,
)
from .validation import Validator, PresenceVerifier
from .pagination import Pagination
from .repository import ResourceRepository, SqlResourceRepository, SqlPresenceVerifier
from .uploads import UploadSink, LocalUploadSink
from .dependency_guard import DependencyGuard
from .responses import RecordsResult, RecordResult, SuccessResult, RedirectResult, ResourceResult
from .controller import ResourceController, ResourceRequest
from .presenter import Presenter, JsonPresenter

__all__ = [
    # Declarations
    "ResourceDefinition",
    "DependencyDescriptor",
    "ControllerConfig",
    "ListOptions",
    "ResponseShape",
    "ReturnOn",
    "RuleSets",
    "default_return_on",
    # Rules
    "StaticRule",
    "UniqueRule",
    "ExistsRule",
    "Rule",
    "RuleInput",
    "parse_rule",
    "normalize_rules",
    "compose_rules",
    "build_rule_set",
    "Validator",
    "PresenceVerifier",
    # Data access
    "Pagination",
    "ResourceRepository",
    "SqlResourceRepository",
    "SqlPresenceVerifier",
    "UploadSink",
    "LocalUploadSink",
    # Orchestration
    "DependencyGuard",
    "ResourceController",
    "ResourceRequest",
    "RecordsResult",
    "RecordResult",
    "SuccessResult",
    "RedirectResult",
    "ResourceResult",
    "Presenter",
    "JsonPresenter",
]
