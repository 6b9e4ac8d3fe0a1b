"""Per-route admission pipeline.

Every request runs through the same ordered chain. The first two stages are
application middleware because they apply to every path; the rest run here,
per route, as declared by the route's ``RouteGuard``:

1. Origin/browser gate (``OriginGateMiddleware``)
2. CORS (Starlette ``CORSMiddleware``)
3. CSRF token consumption, mutating methods only
4. Rate limiters named by the guard, in order
5. JSON body parsing and schema validation, mutating methods only
6. CSRF token issuance, safe methods only
7. The handler
8. Sanitization of the outbound envelope

Cheap header checks run first, tokens are only minted for requests that got
past every gate, and the body is only read once the client is known to be
a rate-permitted browser holding a valid token. The first rejection ends the
chain and is rendered as the error envelope.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from loguru import logger
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import Response

from formgate.api.constants import MUTATING_METHODS, SAFE_METHODS
from formgate.api.utils.requests import get_client_ip
from formgate.api.utils.responses import (
    envelope_response,
    error_envelope,
    success_envelope,
)
from formgate.core.context import RequestContext
from formgate.core.errors import Rejection
from formgate.core.observability import add_span_attributes
from formgate.core.result import Err, Ok, Result
from formgate.security.csrf import CsrfTokenStore
from formgate.security.rate_limiter import RateLimiter, RateLimitStatus
from formgate.security.sanitizer import ResponseSanitizer
from formgate.security.validation import parse_json_body, validate_payload

APP_LIMITER: Final[str] = "app"
FORM_LIMITER: Final[str] = "form"

type Handler = Callable[[Any], Awaitable[Result[Any]]]


@dataclass(frozen=True, slots=True)
class RouteGuard:
    """Which admission stages a route uses.

    Attributes:
        name: Route label used in logs.
        csrf: Consume tokens on mutating methods, mint them on safe ones.
        rate_limits: Names of the pipeline's limiters to charge, in order.
        schema: Body model validated on mutating methods.
    """

    name: str
    csrf: bool = True
    rate_limits: tuple[str, ...] = (APP_LIMITER,)
    schema: type[BaseModel] | None = None


@dataclass(frozen=True, slots=True)
class Admission:
    """What the pipeline learned about an admitted request."""

    payload: BaseModel | None = None
    csrf_token: str | None = None
    rate_limit: RateLimitStatus | None = None

    def headers(self, csrf_header: str) -> dict[str, str]:
        """Response headers owed to the client for this admission."""
        headers = self.rate_limit.headers() if self.rate_limit else {}
        if self.csrf_token:
            headers[csrf_header] = self.csrf_token
        return headers


class RequestPipeline:
    """Run the per-route admission stages and the handler behind them.

    One instance is created per application and owns the shared state
    handed to it (token store and limiters).

    Args:
        csrf_store: Store issuing and consuming CSRF tokens.
        rate_limiters: Limiters by name, referenced from ``RouteGuard``.
        sanitizer: Applied to every envelope this pipeline sends.
        csrf_header: Header carrying the CSRF token in both directions.
        trust_proxy_headers: Take the client IP from proxy headers.
    """

    def __init__(
        self,
        *,
        csrf_store: CsrfTokenStore,
        rate_limiters: Mapping[str, RateLimiter],
        sanitizer: ResponseSanitizer,
        csrf_header: str = "X-CSRF-Token",
        trust_proxy_headers: bool = False,
    ) -> None:
        self.csrf_store = csrf_store
        self.rate_limiters = dict(rate_limiters)
        self.sanitizer = sanitizer
        self.csrf_header = csrf_header
        self.trust_proxy_headers = trust_proxy_headers

    async def admit(self, request: Request, guard: RouteGuard) -> Result[Admission]:
        """Run stages 3 to 6 for one request.

        Args:
            request: The incoming request (already past the origin gate).
            guard: The route's admission policy.

        Returns:
            Result[Admission]: What the handler needs, or the first rejection.
        """
        method = request.method.upper()
        mutating = method in MUTATING_METHODS

        if guard.csrf and mutating:
            token = request.headers.get(self.csrf_header)
            if isinstance(consumed := self.csrf_store.verify_and_consume(token), Err):
                return self._rejected("csrf", guard, consumed.rejection)

        status: RateLimitStatus | None = None
        client_ip = get_client_ip(request, trust_proxy_headers=self.trust_proxy_headers)
        for limiter_name in guard.rate_limits:
            match self.rate_limiters[limiter_name].check(client_ip):
                case Err(rejection):
                    stage = f"rate_limit.{limiter_name}"
                    return self._rejected(stage, guard, rejection)
                case Ok(current):
                    if status is None or current.remaining < status.remaining:
                        status = current

        payload: BaseModel | None = None
        if mutating and guard.schema is not None:
            rate_headers = status.headers() if status else {}
            match parse_json_body(await request.body()):
                case Err(rejection):
                    return self._rejected(
                        "validation", guard, rejection.with_headers(rate_headers)
                    )
                case Ok(body):
                    validated = validate_payload(guard.schema, body)
            match validated:
                case Err(rejection):
                    return self._rejected(
                        "validation", guard, rejection.with_headers(rate_headers)
                    )
                case Ok(model):
                    payload = model

        csrf_token = None
        if guard.csrf and method in SAFE_METHODS:
            csrf_token = self.csrf_store.issue_token()

        return Ok(Admission(payload=payload, csrf_token=csrf_token, rate_limit=status))

    async def run(
        self,
        request: Request,
        guard: RouteGuard,
        handler: Handler,
        *,
        status_code: int = 200,
    ) -> Response:
        """Admit the request, call the handler, and render the envelope.

        Args:
            request: The incoming request.
            guard: The route's admission policy.
            handler: Receives the validated payload (None without a schema)
                and returns ``Ok(data)`` or ``Err(rejection)``.
            status_code: Status for a successful response.

        Returns:
            Response: The sanitized success or error envelope.
        """
        match await self.admit(request, guard):
            case Err(rejection):
                return self.render_rejection(rejection)
            case Ok(admission):
                pass

        headers = admission.headers(self.csrf_header)
        match await handler(admission.payload):
            case Err(rejection):
                self._rejected("handler", guard, rejection)
                return self.render_rejection(rejection.with_headers(headers))
            case Ok(data):
                content = self.sanitizer.sanitize(success_envelope(_jsonable(data)))
                return envelope_response(
                    content, status_code=status_code, headers=headers
                )

    def render_rejection(self, rejection: Rejection) -> Response:
        """Sanitized error envelope for a rejection."""
        return envelope_response(
            self.sanitizer.sanitize(error_envelope(rejection)),
            status_code=rejection.status,
            headers=rejection.headers,
        )

    def _rejected(self, stage: str, guard: RouteGuard, rejection: Rejection) -> Err:
        ids = RequestContext.current().as_fields()
        add_span_attributes(admission_stage=stage, admission_code=rejection.code, **ids)
        log = logger.bind(
            **ids,
            route=guard.name,
            stage=stage,
            rejection_code=rejection.code,
            status_code=rejection.status,
        )
        if rejection.should_alert:
            log.warning("Request rejected: {}", rejection.message)
        else:
            log.info("Request rejected: {}", rejection.message)
        return Err(rejection)


def _jsonable(data: Any) -> Any:  # noqa: ANN401 - handler payloads are arbitrary
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    return data


def get_pipeline(request: Request) -> RequestPipeline:
    """FastAPI dependency returning the application's pipeline."""
    pipeline: RequestPipeline = request.app.state.pipeline
    return pipeline
