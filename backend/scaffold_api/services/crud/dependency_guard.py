"""
Pre-delete referential check.

Every dependency descriptor becomes one uniqueness check on
``table_name.key = entity_id``: a matching row means another record still
points at the entity and the check fails with the descriptor's message.
All descriptors are validated in a single pass, so the caller gets the full
list of blocking references instead of the first one.
"""

from collections.abc import Sequence

from scaffold_shared.config.logging import get_logger

from .definition import DependencyDescriptor
from .repository import ResourceRepository
from .rules import UniqueRule
from .validation import Validator

logger = get_logger(__name__)


class DependencyGuard:
    """Runs the dependency checks of one resource against the data store."""

    def __init__(self, repository: ResourceRepository):
        self._repository = repository

    def check(self, descriptors: Sequence[DependencyDescriptor], entity_id: int) -> list[str]:
        """
        Return one message per descriptor that still has referencing rows.

        Args:
            descriptors: Tables that reference the resource
            entity_id: Id of the entity about to be deleted

        Returns:
            Block messages in declaration order; empty means safe to delete
        """
        if not descriptors:
            return []

        resource_soft_deletes = self._repository.is_soft_delete_enabled()

        data = {}
        rules = {}
        messages = {}
        for descriptor in descriptors:
            field = f"{descriptor.table_name}.{descriptor.key}"
            soft = descriptor.soft_deletes
            if soft is None:
                soft = resource_soft_deletes

            data[field] = int(entity_id)
            rules[field] = [
                UniqueRule(
                    table=descriptor.table_name,
                    column=descriptor.key,
                    without_deleted=soft,
                )
            ]
            messages[f"{field}.unique"] = descriptor.message

        validator = Validator(data, rules, messages, presence=self._repository.presence)
        errors = validator.errors()

        blocked = [
            message
            for descriptor in descriptors
            for message in errors.get(f"{descriptor.table_name}.{descriptor.key}", [])
        ]

        if blocked:
            logger.info(
                "Delete blocked by dependencies",
                table=self._repository.table_name(),
                entity_id=entity_id,
                blocked_by=len(blocked),
            )
        return blocked
