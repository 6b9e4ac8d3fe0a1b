"""``/endpoint2``: task submissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from formgate.api.pipeline import (
    APP_LIMITER,
    FORM_LIMITER,
    RequestPipeline,
    RouteGuard,
    get_pipeline,
)
from formgate.api.schemas.endpoint2 import Endpoint2Create
from formgate.api.schemas.envelopes import ErrorResponse
from formgate.core.result import Result
from formgate.services import endpoint2 as service

router = APIRouter(prefix="/endpoint2", tags=["endpoint2"])

READ_GUARD = RouteGuard(name="endpoint2.read")
CREATE_GUARD = RouteGuard(
    name="endpoint2.create",
    rate_limits=(APP_LIMITER, FORM_LIMITER),
    schema=Endpoint2Create,
)

_REJECTIONS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
}


async def _read(_payload: None) -> Result[object]:
    return await service.get_data()


async def _create(payload: Endpoint2Create) -> Result[object]:
    return await service.create_data(payload)


@router.get("", response_model=None, responses=_REJECTIONS)
async def read_endpoint2(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_pipeline)],
) -> Response:
    """Return a sample task and a fresh CSRF token."""
    return await pipeline.run(request, READ_GUARD, _read)


@router.post(
    "",
    response_model=None,
    status_code=status.HTTP_201_CREATED,
    responses=_REJECTIONS,
)
async def create_endpoint2(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_pipeline)],
) -> Response:
    """Create a task (or only validate it when ``dryRun`` is set)."""
    return await pipeline.run(
        request, CREATE_GUARD, _create, status_code=status.HTTP_201_CREATED
    )
