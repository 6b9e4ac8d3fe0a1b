"""Fixtures for API layer unit tests."""

from collections.abc import Callable

import pytest
from starlette.requests import Request
from starlette.types import Message

from formgate.api.pipeline import APP_LIMITER, FORM_LIMITER, RequestPipeline
from formgate.security.csrf import CsrfTokenStore
from formgate.security.rate_limiter import RateLimiter
from formgate.security.sanitizer import ResponseSanitizer

RequestFactory = Callable[..., Request]


@pytest.fixture
def make_request() -> RequestFactory:
    """Build a Starlette request from a raw ASGI scope.

    Returns:
        RequestFactory: Factory taking method, body, headers and client host.
    """

    def _make(
        method: str = "GET",
        *,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
        client_host: str = "10.0.0.1",
        path: str = "/endpoint1",
    ) -> Request:
        async def receive() -> Message:
            return {"type": "http.request", "body": body, "more_body": False}

        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
            "client": (client_host, 50000),
            "server": ("testserver", 80),
            "scheme": "http",
            "root_path": "",
        }
        return Request(scope, receive)

    return _make


@pytest.fixture
def pipeline() -> RequestPipeline:
    """Pipeline with a roomy app limiter and a tight form limiter.

    Returns:
        RequestPipeline: Fresh pipeline with its own state.
    """
    return RequestPipeline(
        csrf_store=CsrfTokenStore(),
        rate_limiters={
            APP_LIMITER: RateLimiter(max_requests=100, window_seconds=900),
            FORM_LIMITER: RateLimiter(
                max_requests=2, window_seconds=10, namespace=FORM_LIMITER
            ),
        },
        sanitizer=ResponseSanitizer(),
    )
