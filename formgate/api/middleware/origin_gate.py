"""Middleware applying the origin/browser gate to every request.

It sits outside ``CORSMiddleware`` so that requests from unknown origins,
CORS preflights included, are refused before any CORS headers are computed.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from formgate.api.utils.responses import rejection_response
from formgate.core.context import RequestContext
from formgate.core.observability import add_span_attributes
from formgate.core.result import Err
from formgate.security.origin_gate import OriginGate


class OriginGateMiddleware(BaseHTTPMiddleware):
    """Reject requests that the ``OriginGate`` does not admit.

    Args:
        app: The ASGI application to wrap.
        gate: The configured gate.
    """

    def __init__(self, app: ASGIApp, *, gate: OriginGate) -> None:
        super().__init__(app)
        self.gate = gate

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Answer 403 for rejected requests, pass the rest through."""
        outcome = self.gate.check(request.headers)
        if isinstance(outcome, Err):
            rejection = outcome.rejection
            ids = RequestContext.current().as_fields()
            add_span_attributes(
                admission_stage="origin", admission_code=rejection.code, **ids
            )
            logger.warning(
                "Request rejected: {}",
                rejection.message,
                stage="origin",
                rejection_code=rejection.code,
                status_code=rejection.status,
            )
            return rejection_response(rejection)
        return await call_next(request)
