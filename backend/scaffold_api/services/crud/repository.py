"""
Repository contract consumed by the resource controller, and its
SQLAlchemy implementation.

Usage:
    repo = SqlResourceRepository(CUSTOMERS, db, uploads=LocalUploadSink())

    repo.has(7)
    repo.list({"page": 2, "paginate": True, "as_model": True})
    repo.get_pagination_info()
    repo.create({"name": "Ada", "email": "ada@example.com"})

One repository instance serves one request: it remembers the pagination
info of its last list() call.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pydantic import BaseModel
from sqlalchemy import column as sql_column, exists as sql_exists, func, inspect as sa_inspect, select, table
from sqlalchemy.orm import Session, load_only
from sqlalchemy.sql import Select

from scaffold_shared.config.logging import get_logger
from scaffold_shared.config.settings import settings
from scaffold_shared.infrastructure.db import safe_commit
from scaffold_shared.utils.exceptions import InternalError, NotFoundError, ValidationError

from .definition import DependencyDescriptor, ResourceDefinition
from .pagination import Pagination
from .soft_delete import filter_active, hard_delete, soft_delete
from .uploads import UploadSink
from .validation import PresenceVerifier, is_upload

logger = get_logger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def _flag(value: Any) -> bool:
    """Truthiness of an option that may come from the query string."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


class ResourceRepository(Protocol):
    """Everything the controller needs from the data store."""

    @property
    def presence(self) -> PresenceVerifier:
        ...

    def has(self, entity_id: int) -> bool:
        ...

    def fetch_projected(self, entity_id: int) -> BaseModel:
        ...

    def list(self, options: Mapping[str, Any]) -> list[Any]:
        ...

    def get_pagination_info(self) -> dict[str, Any] | None:
        ...

    def create(self, payload: Mapping[str, Any]) -> Any:
        ...

    def update(self, entity_id: int, payload: Mapping[str, Any]) -> Any:
        ...

    def delete(self, entity_id: int) -> None:
        ...

    def is_soft_delete_enabled(self) -> bool:
        ...

    def has_delete_dependencies(self) -> bool:
        ...

    def get_delete_dependencies(self) -> list[DependencyDescriptor]:
        ...

    def table_name(self) -> str:
        ...


class SqlPresenceVerifier:
    """Counts matching rows of any table through lightweight table constructs."""

    def __init__(self, session: Session):
        self._session = session

    def count(
        self,
        table_name: str,
        column_name: str,
        value: Any,
        *,
        exclude_id: int | None = None,
        id_column: str = "id",
        null_columns: Sequence[str] = (),
    ) -> int:
        names = dict.fromkeys([column_name, id_column, *null_columns])
        target = table(table_name, *(sql_column(name) for name in names))

        query = select(func.count()).select_from(target).where(target.c[column_name] == value)
        if exclude_id is not None:
            query = query.where(target.c[id_column] != exclude_id)
        for name in null_columns:
            query = query.where(target.c[name].is_(None))

        return self._session.scalar(query) or 0


class SqlResourceRepository:
    """
    SQLAlchemy-backed repository for one resource definition.

    Soft-deleted rows are invisible to has(), fetch_projected() and list().
    Mutations only copy the definition's whitelisted data fields and route
    upload fields through the upload sink. Commit failures are rolled back
    and re-raised unchanged.
    """

    def __init__(
        self,
        definition: ResourceDefinition,
        session: Session,
        uploads: UploadSink | None = None,
    ):
        self._definition = definition
        self._model = definition.model
        self._session = session
        self._uploads = uploads
        self._presence = SqlPresenceVerifier(session)
        self._pagination_info: dict[str, Any] | None = None

    @property
    def definition(self) -> ResourceDefinition:
        return self._definition

    @property
    def session(self) -> Session:
        return self._session

    @property
    def presence(self) -> SqlPresenceVerifier:
        return self._presence

    # =========================================================================
    # Queries
    # =========================================================================

    def _base_query(self) -> Select:
        query = select(self._model)
        if self.is_soft_delete_enabled():
            query = filter_active(query, self._model)
        return query

    def _find(self, entity_id: int) -> Any | None:
        return self._session.scalar(self._base_query().where(self._model.id == entity_id))

    def _get_or_fail(self, entity_id: int) -> Any:
        entity = self._find(entity_id)
        if entity is None:
            raise NotFoundError(self._definition.display_name, entity_id, resource=self._definition.name)
        return entity

    def has(self, entity_id: int) -> bool:
        condition = [self._model.id == entity_id]
        if self.is_soft_delete_enabled():
            condition.append(self._model.deleted_at.is_(None))
        return self._session.scalar(select(sql_exists().where(*condition))) or False

    def fetch_projected(self, entity_id: int) -> BaseModel:
        return self._project(self._get_or_fail(entity_id))

    def list(self, options: Mapping[str, Any]) -> list[Any]:
        """
        List records.

        Recognised options: every ``filter_by`` field, ``select`` (fields to
        load), ``paginate`` / ``items_per_page`` / ``page``, and ``as_model``
        (return ORM rows instead of output projections).
        """
        self._pagination_info = None

        query = self._apply_filters(self._base_query(), options)

        select_fields = [
            getattr(self._model, name)
            for name in options.get("select") or ()
            if name != "id" and name in sa_inspect(self._model).columns
        ]
        if select_fields:
            query = query.options(load_only(self._model.id, *select_fields))

        query = query.order_by(self._model.id)

        if _flag(options.get("paginate")):
            try:
                per_page = int(options.get("items_per_page") or settings.default_page_size)
            except (TypeError, ValueError):
                raise ValidationError("items_per_page must be an integer", value=options.get("items_per_page"))

            pagination = Pagination.for_page(
                options.get("page", 1),
                per_page,
                max_limit=settings.max_page_size,
            )
            total = self._session.scalar(
                select(func.count()).select_from(query.order_by(None).subquery())
            ) or 0
            query = query.offset(pagination.offset).limit(pagination.limit)
            self._pagination_info = pagination.to_dict(total=total)

        entities = self._session.scalars(query).all()
        if _flag(options.get("as_model")):
            return list(entities)
        return [self._project(entity) for entity in entities]

    def get_pagination_info(self) -> dict[str, Any] | None:
        return self._pagination_info

    def _apply_filters(self, query: Select, options: Mapping[str, Any]) -> Select:
        columns = sa_inspect(self._model).columns
        for name in self._definition.filter_by:
            value = options.get(name)
            if value is None or value == "" or name not in columns:
                continue

            attribute = getattr(self._model, name)
            if isinstance(value, (list, tuple)):
                query = query.where(attribute.in_([self._coerce(name, item) for item in value]))
            else:
                query = query.where(attribute == self._coerce(name, value))
        return query

    def _coerce(self, name: str, value: Any) -> Any:
        """Convert a query-string value to the filtered column's Python type."""
        try:
            python_type = sa_inspect(self._model).columns[name].type.python_type
        except NotImplementedError:
            return value

        if not isinstance(value, str) or python_type is str:
            return value

        if python_type is bool:
            lowered = value.strip().lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
            raise ValidationError(f"Invalid value for filter '{name}'", field=name, value=value)

        if python_type in (int, float):
            try:
                return python_type(value)
            except ValueError:
                raise ValidationError(f"Invalid value for filter '{name}'", field=name, value=value)

        return value

    def _project(self, entity: Any) -> BaseModel:
        return self._definition.output_schema.model_validate(entity, from_attributes=True)

    # =========================================================================
    # Mutations
    # =========================================================================

    def _collect(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Whitelisted data fields present in the payload, plus stored uploads."""
        upload_columns = self._definition.upload_columns
        skipped = set(upload_columns) | set(upload_columns.values())

        values = {
            name: payload[name]
            for name in self._definition.data
            if name in payload and name not in skipped
        }

        for request_key, column_name in upload_columns.items():
            upload = payload.get(request_key)
            if not is_upload(upload) or not upload.filename:
                continue
            if self._uploads is None:
                raise InternalError(
                    "Upload storage is not configured",
                    resource=self._definition.name,
                    field=request_key,
                )
            values[column_name] = self._uploads.store(self._definition.name, request_key, upload)

        return values

    def create(self, payload: Mapping[str, Any]) -> Any:
        entity = self._model(**self._collect(payload))
        self._session.add(entity)
        safe_commit(self._session)
        self._session.refresh(entity)

        logger.info("Resource created", resource=self._definition.name, entity_id=entity.id)
        return entity

    def update(self, entity_id: int, payload: Mapping[str, Any]) -> Any:
        entity = self._get_or_fail(entity_id)
        for name, value in self._collect(payload).items():
            setattr(entity, name, value)

        safe_commit(self._session)
        self._session.refresh(entity)

        logger.info("Resource updated", resource=self._definition.name, entity_id=entity_id)
        return entity

    def delete(self, entity_id: int) -> None:
        entity = self._get_or_fail(entity_id)
        if self.is_soft_delete_enabled():
            soft_delete(self._session, entity)
        else:
            hard_delete(self._session, entity)

        logger.info(
            "Resource deleted",
            resource=self._definition.name,
            entity_id=entity_id,
            soft=self.is_soft_delete_enabled(),
        )

    # =========================================================================
    # Resource metadata
    # =========================================================================

    def is_soft_delete_enabled(self) -> bool:
        return self._definition.uses_soft_delete

    def has_delete_dependencies(self) -> bool:
        return bool(self._definition.delete_dependencies)

    def get_delete_dependencies(self) -> list[DependencyDescriptor]:
        return list(self._definition.delete_dependencies)

    def table_name(self) -> str:
        return self._definition.table_name
