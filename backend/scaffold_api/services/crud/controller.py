"""
Generic resource controller: list, fetch, create, update, destroy.

Usage:
    class CustomerController(ResourceController):
        pass

    controller = CustomerController(
        SqlResourceRepository(CUSTOMERS, db),
        ControllerConfig(view="admin.customers", rules=RuleSets(...)),
    )
    result = controller.create(ResourceRequest(data={"name": "Ada"}))

Subclasses override store_rules() / update_rules() when the rules depend
on the request.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from scaffold_shared.config.logging import get_logger
from scaffold_shared.utils.exceptions import (
    DependencyBlockedError,
    NotFoundError,
    ValidationFailedError,
)

from .config import ControllerConfig, ResponseShape, ReturnOn, default_return_on
from .dependency_guard import DependencyGuard
from .repository import ResourceRepository
from .responses import RecordResult, RecordsResult, RedirectResult, ResourceResult, SuccessResult
from .rules import RuleInput, build_rule_set, compose_rules
from .validation import Validator

logger = get_logger(__name__)


@dataclass
class ResourceRequest:
    """
    What the controller needs from an inbound request.

    ``data`` holds the submitted fields (body or form, uploads included),
    ``query`` the query-string parameters.
    """

    data: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    is_ajax: bool = False
    back_url: str = "/"

    def all(self) -> dict[str, Any]:
        """Query parameters and submitted data in one map, data winning."""
        return {**self.query, **self.data}


class ResourceController:
    """
    Orchestrates the CRUD operations of one resource.

    The controller never touches entities itself: existence checks,
    listing and mutations go through the repository, validation through
    the rule composer and validator, and delete checks through the
    dependency guard.
    """

    def __init__(
        self,
        repository: ResourceRepository,
        config: ControllerConfig | None = None,
        *,
        defaults: ReturnOn | None = None,
        entity_name: str | None = None,
    ):
        self.repository = repository
        self.config = config or ControllerConfig()
        self.return_on = self.config.return_on.resolve(defaults or default_return_on())
        self.entity_name = entity_name or self.repository.table_name()
        self.dependency_guard = DependencyGuard(repository)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def list(self, request: ResourceRequest) -> RecordsResult:
        """List records using the request's parameters and the static list options."""
        records = self.repository.list(self.list_options(request))

        result = RecordsResult(view=self._view("index"), records=records)
        pagination_info = self.repository.get_pagination_info()
        if pagination_info:
            result.pagination_info = pagination_info
        return result

    def list_options(self, request: ResourceRequest) -> dict[str, Any]:
        return {**request.all(), **self.config.list_options.as_dict(), "as_model": True}

    def fetch(self, entity_id: int) -> RecordResult:
        """
        Fetch one record.

        Raises:
            NotFoundError: If the repository doesn't have the id
        """
        entity_id = int(entity_id)
        self._ensure_exists(entity_id)
        return RecordResult(view=self._view("index"), record=self.repository.fetch_projected(entity_id))

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, request: ResourceRequest) -> ResourceResult:
        """
        Validate and create a record, then answer per the store policy.

        Raises:
            ValidationFailedError: If the submitted data breaks any rule
        """
        rules = build_rule_set(
            compose_rules(self.config.rules.all, self.store_rules(request)),
            table=self.repository.table_name(),
        )
        self._validate(request.data, rules)

        entity = self.repository.create(request.data)

        shape = self.return_on.store
        if shape == ResponseShape.SINGLE_RECORD:
            return self.fetch(entity.id)
        if shape == ResponseShape.ALL_RECORDS:
            return self.list(request)
        return RedirectResult(url=request.back_url)

    def update(self, entity_id: int, request: ResourceRequest) -> ResourceResult:
        """
        Validate and update a record, then answer per the update policy.

        A bare ``unique`` rule is checked against this resource's table and
        skips the record being updated.

        Raises:
            NotFoundError: If the repository doesn't have the id
            ValidationFailedError: If the submitted data breaks any rule
        """
        entity_id = int(entity_id)
        self._ensure_exists(entity_id)

        rules = build_rule_set(
            compose_rules(self.config.rules.all, self.update_rules(entity_id, request)),
            table=self.repository.table_name(),
            exclude_id=entity_id,
        )
        self._validate(request.data, rules)

        self.repository.update(entity_id, request.data)

        shape = self.return_on.update
        if shape == ResponseShape.SINGLE_RECORD:
            return self.fetch(entity_id)
        if shape == ResponseShape.ALL_RECORDS:
            return self.list(request)
        return SuccessResult()

    def destroy(self, entity_id: int, request: ResourceRequest) -> ResourceResult:
        """
        Delete a record unless live rows of dependent tables reference it.

        Raises:
            DependencyBlockedError: With one message per blocking dependency
        """
        entity_id = int(entity_id)

        if self.repository.has_delete_dependencies():
            blocked = self.dependency_guard.check(self.repository.get_delete_dependencies(), entity_id)
            if blocked:
                raise DependencyBlockedError(blocked, resource=self.entity_name, entity_id=entity_id)

        self.repository.delete(entity_id)

        if request.is_ajax:
            return SuccessResult()
        return RedirectResult(url=request.back_url)

    # =========================================================================
    # Rule hooks
    # =========================================================================

    def store_rules(self, request: ResourceRequest) -> Mapping[str, RuleInput]:
        """Rules that apply only when creating."""
        return self.config.rules.store

    def update_rules(self, entity_id: int, request: ResourceRequest) -> Mapping[str, RuleInput]:
        """Rules that apply only when updating."""
        return self.config.rules.update

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _view(self, name: str) -> str:
        if self.config.view:
            return f"{self.config.view}.{name}"
        return name

    def _ensure_exists(self, entity_id: int) -> None:
        if not self.repository.has(entity_id):
            raise NotFoundError(self.entity_name, entity_id)

    def _validate(self, data: Mapping[str, Any], rules: dict) -> None:
        validator = Validator(data, rules, presence=self.repository.presence)
        if not validator.passes():
            raise ValidationFailedError(validator.errors(), resource=self.entity_name)
