"""HTTP request/response logging with performance monitoring.

Every request outside the excluded paths produces a "Request started" and a
"Request completed" (or "Request failed") line carrying method, path,
client address, origin, status and duration. Rejections from the origin
gate run inside this middleware, so they are logged like any other
response. Headers are only logged at DEBUG level, with credentials and
CSRF tokens redacted.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from formgate.api.constants import REQUEST_ID_HEADER
from formgate.api.utils.requests import get_client_ip, get_user_agent
from formgate.core.config import LogConfig
from formgate.core.constants import MILLISECONDS_PER_SECOND
from formgate.core.context import REQUEST_ID_PREFIX, RequestContext, generate_id
from formgate.core.error_context import sanitize_headers


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
        trust_proxy_headers: Read the client IP from proxy headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        log_config: LogConfig,
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = set(log_config.excluded_paths)
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log details.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.

        Raises:
            Exception: Any exception raised by the application is re-raised
                after logging.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_id(
            REQUEST_ID_PREFIX
        )
        token = RequestContext.bind(request_id=request_id)
        try:
            return await self._log_request(request, call_next, request_id)
        finally:
            RequestContext.reset(token)

    async def _log_request(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
        request_id: str,
    ) -> Response:
        client_ip = get_client_ip(request, trust_proxy_headers=self.trust_proxy_headers)

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=client_ip,
            origin=request.headers.get("origin", "none"),
            user_agent=get_user_agent(request),
        ):
            logger.info("Request started")
            logger.debug(
                "Request headers", headers=sanitize_headers(dict(request.headers))
            )

            start_time = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                elapsed = time.perf_counter() - start_time
                duration_ms = elapsed * MILLISECONDS_PER_SECOND
                logger.error(
                    "Request failed",
                    duration_ms=round(duration_ms, 2),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=round(duration_ms, 2),
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
