"""
Presenters turn controller results into HTTP responses.
"""

from typing import Any, Protocol

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from scaffold_shared.config.logging import get_logger

from .responses import RecordResult, RecordsResult, RedirectResult, ResourceResult, SuccessResult

logger = get_logger(__name__)


class Presenter(Protocol):
    def present(self, result: ResourceResult) -> Response:
        ...


class JsonPresenter:
    """
    Renders results as JSON.

    ORM rows (listings are fetched as native entities) are projected through
    the resource's output schema; pydantic models are dumped as they are.
    """

    def __init__(self, projection: type[BaseModel]):
        self._projection = projection

    def present(self, result: ResourceResult) -> Response:
        if isinstance(result, RecordsResult):
            logger.debug("Rendering records", view=result.view, count=len(result.records))
            content: dict[str, Any] = {"records": [self._project(record) for record in result.records]}
            if result.pagination_info is not None:
                content["paginationInfo"] = result.pagination_info
            return JSONResponse(jsonable_encoder(content))

        if isinstance(result, RecordResult):
            logger.debug("Rendering record", view=result.view)
            return JSONResponse(jsonable_encoder({"record": self._project(result.record)}))

        if isinstance(result, SuccessResult):
            content = {"success": True}
            if result.message:
                content["message"] = result.message
            return JSONResponse(content)

        if isinstance(result, RedirectResult):
            return RedirectResponse(result.url, status_code=status.HTTP_303_SEE_OTHER)

        raise TypeError(f"Unsupported result {result!r}")

    def _project(self, record: Any) -> Any:
        if isinstance(record, BaseModel):
            return record.model_dump(mode="json")
        return self._projection.model_validate(record, from_attributes=True).model_dump(mode="json")
