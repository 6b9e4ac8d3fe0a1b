"""Request context middleware for correlation IDs.

An incoming ``X-Correlation-ID`` is kept, otherwise a new one is generated.
It is stored in a context variable, bound to every log line emitted while
the request is handled, and echoed back in the response headers.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from formgate.api.constants import CORRELATION_ID_HEADER
from formgate.core.context import RequestContext, generate_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to manage request context and correlation IDs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with correlation ID header.
        """
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or generate_id()
        token = RequestContext.bind(correlation_id=correlation_id)

        # contextualize scopes the binding to this request only
        try:
            with logger.contextualize(correlation_id=correlation_id):
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                return response
        finally:
            RequestContext.reset(token)
