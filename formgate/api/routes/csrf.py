"""``GET /csrf``: hand the client a token before its first submission."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from formgate.api.pipeline import RequestPipeline, RouteGuard, get_pipeline
from formgate.api.schemas.envelopes import ErrorResponse
from formgate.core.result import Ok, Result

router = APIRouter(tags=["csrf"])

CSRF_GUARD = RouteGuard(name="csrf.issue")


async def _empty(_payload: None) -> Result[dict[str, str]]:
    return Ok({})


@router.get(
    "/csrf",
    response_model=None,
    responses={403: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def issue_csrf_token(
    request: Request,
    pipeline: Annotated[RequestPipeline, Depends(get_pipeline)],
) -> Response:
    """Return an empty success envelope; the token is in ``X-CSRF-Token``."""
    return await pipeline.run(request, CSRF_GUARD, _empty)
