"""
Route registration for scaffolded resources.

Usage:
    router = resource_router(
        CUSTOMERS,
        controller_factory(CUSTOMERS, CUSTOMER_CONFIG),
        prefix="/api/admin/customers",
    )
    app.include_router(router)

Registers:
    GET     {prefix}              list
    GET     {prefix}/{entity_id}  fetch
    POST    {prefix}              create
    PUT     {prefix}/{entity_id}  update (PATCH accepted too)
    DELETE  {prefix}/{entity_id}  destroy
"""

from typing import Any, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from scaffold_shared.infrastructure.db import get_db
from scaffold_shared.utils.exceptions import ValidationError
from scaffold_api.services.crud import (
    ControllerConfig,
    JsonPresenter,
    LocalUploadSink,
    Presenter,
    ResourceController,
    ResourceDefinition,
    ResourceRequest,
    SqlResourceRepository,
    UploadSink,
)

ControllerFactory = Callable[[Session], ResourceController]

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def controller_factory(
    definition: ResourceDefinition,
    config: ControllerConfig | None = None,
    *,
    controller_class: type[ResourceController] = ResourceController,
    uploads: UploadSink | None = None,
) -> ControllerFactory:
    """
    Build a per-request controller factory for a resource.

    A local upload sink is created when the resource declares upload fields
    and no sink is given.
    """
    if uploads is None and definition.upload_columns:
        uploads = LocalUploadSink()

    def factory(db: Session) -> ResourceController:
        repository = SqlResourceRepository(definition, db, uploads=uploads)
        return controller_class(repository, config, entity_name=definition.display_name)

    return factory


async def read_payload(request: Request) -> dict[str, Any]:
    """Submitted fields from a JSON body or a form (uploads included)."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        payload: dict[str, Any] = {}
        for key in form.keys():
            values = form.getlist(key)
            payload[key] = values if len(values) > 1 else values[0]
        return payload

    body = await request.body()
    if not body:
        return {}

    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


async def build_resource_request(request: Request, back_url: str, *, with_body: bool = True) -> ResourceRequest:
    """Adapt a FastAPI request to what the controller reads."""
    return ResourceRequest(
        data=await read_payload(request) if with_body else {},
        query=dict(request.query_params),
        is_ajax=request.headers.get("x-requested-with", "").lower() == "xmlhttprequest",
        back_url=request.headers.get("referer") or back_url,
    )


def resource_router(
    definition: ResourceDefinition,
    factory: ControllerFactory,
    *,
    prefix: str | None = None,
    presenter: Presenter | None = None,
    tags: list[str] | None = None,
) -> APIRouter:
    """Register the five CRUD routes of a resource."""
    prefix = prefix or f"/{definition.name}"
    presenter = presenter or JsonPresenter(definition.output_schema)
    router = APIRouter(prefix=prefix, tags=tags or [definition.name])

    def get_controller(db: Session = Depends(get_db)) -> ResourceController:
        return factory(db)

    @router.get("", name=f"{definition.name}.index")
    async def index(request: Request, controller: ResourceController = Depends(get_controller)) -> Response:
        resource_request = await build_resource_request(request, prefix, with_body=False)
        result = await run_in_threadpool(controller.list, resource_request)
        return presenter.present(result)

    @router.get("/{entity_id}", name=f"{definition.name}.show")
    async def show(entity_id: int, controller: ResourceController = Depends(get_controller)) -> Response:
        result = await run_in_threadpool(controller.fetch, entity_id)
        return presenter.present(result)

    @router.post("", name=f"{definition.name}.store")
    async def store(request: Request, controller: ResourceController = Depends(get_controller)) -> Response:
        resource_request = await build_resource_request(request, prefix)
        result = await run_in_threadpool(controller.create, resource_request)
        return presenter.present(result)

    @router.api_route("/{entity_id}", methods=["PUT", "PATCH"], name=f"{definition.name}.update")
    async def update(
        entity_id: int,
        request: Request,
        controller: ResourceController = Depends(get_controller),
    ) -> Response:
        resource_request = await build_resource_request(request, prefix)
        result = await run_in_threadpool(controller.update, entity_id, resource_request)
        return presenter.present(result)

    @router.delete("/{entity_id}", name=f"{definition.name}.destroy")
    async def destroy(
        entity_id: int,
        request: Request,
        controller: ResourceController = Depends(get_controller),
    ) -> Response:
        resource_request = await build_resource_request(request, prefix, with_body=False)
        result = await run_in_threadpool(controller.destroy, entity_id, resource_request)
        return presenter.present(result)

    return router
