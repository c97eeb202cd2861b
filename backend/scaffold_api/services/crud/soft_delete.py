"""
Soft delete helpers shared by repositories.

A soft-deleted row keeps its data and gets a deletion timestamp; queries
built with filter_active() no longer see it.
"""

from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from scaffold_shared.infrastructure.db import safe_commit

T = TypeVar("T")

DELETED_AT = "deleted_at"


def supports_soft_delete(model: type[Any], deleted_column: str = DELETED_AT) -> bool:
    """Check whether the model carries a deletion timestamp column."""
    return hasattr(model, deleted_column)


def filter_active(query: Select, model: type[Any], deleted_column: str = DELETED_AT) -> Select:
    """Restrict a query to rows that are not soft-deleted."""
    return query.where(getattr(model, deleted_column).is_(None))


def soft_delete(db: Session, entity: T, deleted_column: str = DELETED_AT, commit: bool = True) -> T:
    """
    Mark an entity as deleted.

    Args:
        db: Database session
        entity: Entity whose model has a deletion timestamp column
        deleted_column: Name of that column
        commit: Commit immediately (rolls back and re-raises on failure)

    Returns:
        The soft-deleted entity
    """
    if hasattr(entity, "soft_delete") and deleted_column == DELETED_AT:
        entity.soft_delete()
    else:
        setattr(entity, deleted_column, datetime.now(timezone.utc))

    if commit:
        safe_commit(db)
        db.refresh(entity)
    return entity


def hard_delete(db: Session, entity: Any, commit: bool = True) -> None:
    """Permanently remove an entity."""
    db.delete(entity)
    if commit:
        safe_commit(db)
