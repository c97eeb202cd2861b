"""
Static declaration of a scaffolded resource.

Usage:
    CUSTOMERS = ResourceDefinition(
        name="customers",
        model=Customer,
        output_schema=CustomerOutput,
        data=("name", "email"),
        uploads=("avatar",),                      # request key == column
        # uploads={"photo": "avatar_path"},       # request key -> column
        filter_by=("email",),
        delete_dependencies=(
            DependencyDescriptor("orders", "customer_id", "has orders"),
        ),
    )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel

from .soft_delete import supports_soft_delete


@dataclass(frozen=True)
class DependencyDescriptor:
    """
    A table whose rows reference this resource and block its deletion.

    ``soft_deletes`` decides whether soft-deleted rows of the dependent table
    are ignored; ``None`` follows the resource's own soft-delete setting.
    """

    table_name: str
    key: str
    message: str
    soft_deletes: bool | None = None


@dataclass(frozen=True)
class ResourceDefinition:
    """Identity, backing model and field declarations of one resource type."""

    name: str
    model: type[Any]
    output_schema: type[BaseModel]
    data: tuple[str, ...] = ()
    uploads: Sequence[str] | Mapping[str, str] = ()
    filter_by: tuple[str, ...] = ()
    delete_dependencies: tuple[DependencyDescriptor, ...] = ()
    soft_delete: bool | None = None
    entity_name: str | None = None
    upload_columns: Mapping[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Resource name is required")

        if isinstance(self.uploads, Mapping):
            columns = dict(self.uploads)
        elif isinstance(self.uploads, str):
            raise TypeError("uploads must be a sequence of field names or a mapping")
        else:
            columns = {key: key for key in self.uploads}

        # frozen dataclass: normalised values are set through object.__setattr__
        object.__setattr__(self, "data", tuple(self.data))
        object.__setattr__(self, "filter_by", tuple(self.filter_by))
        object.__setattr__(self, "delete_dependencies", tuple(self.delete_dependencies))
        object.__setattr__(self, "upload_columns", MappingProxyType(columns))

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def uses_soft_delete(self) -> bool:
        if self.soft_delete is not None:
            return self.soft_delete
        return supports_soft_delete(self.model)

    @property
    def display_name(self) -> str:
        """Human-readable name used in error messages."""
        if self.entity_name:
            return self.entity_name
        return self.name.replace("_", " ").replace("-", " ").capitalize()
