"""``/endpoint1``: contact-style form submissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from formgate.api.pipeline import (
    APP_LIMITER,
    FORM_LIMITER,
    RequestPipeline,
    RouteGuard,
    get_pipeline,
)
from formgate.api.schemas.endpoint1 import Endpoint1Create
from formgate.api.schemas.envelopes import ErrorResponse
from formgate.core.result import Result
from formgate.services import endpoint1 as service

router = APIRouter(prefix="/endpoint1", tags=["endpoint1"])

READ_GUARD = RouteGuard(name="endpoint1.read")
CREATE_GUARD = RouteGuard(
    name="endpoint1.create",
    rate_limits=(APP_LIMITER, FORM_LIMITER),
    schema=Endpoint1Create,
)

_REJECTIONS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
}


async def _read(_payload: None) -> Result[object]:
    return await service.get_data()


async def _create(payload: Endpoint1Create) -> Result[object]:
    return await service.create_data(payload)


@router.get("", response_model=None, responses=_REJECTIONS)
async def read_endpoint1(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_pipeline)],
) -> Response:
    """Return a sample submission and a fresh CSRF token."""
    return await pipeline.run(request, READ_GUARD, _read)


@router.post(
    "",
    response_model=None,
    status_code=status.HTTP_201_CREATED,
    responses=_REJECTIONS,
)
async def create_endpoint1(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_pipeline)],
) -> Response:
    """Validate a submission and echo it back as a created record."""
    return await pipeline.run(
        request, CREATE_GUARD, _create, status_code=status.HTTP_201_CREATED
    )
