"""FastAPI application initialization and configuration module.

``create_app`` builds the whole service from ``Settings``: logging and
tracing, the shared security state (CSRF token store, rate limiters,
sanitizer), the middleware stack, the exception handlers and the routes.
The security state is created per application and kept on ``app.state``,
so every app instance (and every test) starts from a clean slate.

Middleware are executed in reverse order of registration; see
``formgate.api.middleware`` for the resulting order.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from formgate.api.middleware.error_handler import register_exception_handlers
from formgate.api.middleware.origin_gate import OriginGateMiddleware
from formgate.api.middleware.request_context import RequestContextMiddleware
from formgate.api.middleware.request_logging import RequestLoggingMiddleware
from formgate.api.middleware.security_headers import SecurityHeadersMiddleware
from formgate.api.pipeline import APP_LIMITER, FORM_LIMITER, RequestPipeline
from formgate.api.routes import api_router
from formgate.api.utils.responses import ORJSONResponse
from formgate.core.config import RateLimitConfig, Settings, get_settings
from formgate.core.logging import setup_logging
from formgate.core.observability import instrument_app, setup_tracing
from formgate.security.csrf import CsrfTokenStore
from formgate.security.origin_gate import OriginGate
from formgate.security.rate_limiter import RateLimiter
from formgate.security.sanitizer import ResponseSanitizer


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    settings: Settings = app_instance.state.settings
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
        environment=settings.environment,
        allowed_origins=settings.cors_origins,
    )

    yield

    logger.info("Application shutdown initiated")
    # Tokens are process-local; none survive a restart
    app_instance.state.csrf_store.clear()
    logger.info("Application shutdown complete")


def build_rate_limiter(config: RateLimitConfig, namespace: str) -> RateLimiter:
    """Create a limiter from its configuration section."""
    return RateLimiter(
        max_requests=config.max_requests,
        window_seconds=config.window_seconds,
        key_strategy=config.key_strategy,
        namespace=namespace,
        message=config.message,
    )


def build_pipeline(
    settings: Settings, *, csrf_store: CsrfTokenStore | None = None
) -> RequestPipeline:
    """Create the request pipeline and the state it owns.

    Args:
        settings: Application settings.
        csrf_store: Token store to use instead of a fresh one.

    Returns:
        RequestPipeline: Pipeline with an ``app`` and a ``form`` limiter.
    """
    csrf = settings.csrf_config
    if csrf_store is None:
        csrf_store = CsrfTokenStore(
            token_bytes=csrf.token_bytes,
            ttl_seconds=csrf.ttl_seconds,
            max_tokens=csrf.max_tokens,
        )
    return RequestPipeline(
        csrf_store=csrf_store,
        rate_limiters={
            APP_LIMITER: build_rate_limiter(settings.rate_limit_config, APP_LIMITER),
            FORM_LIMITER: build_rate_limiter(
                settings.form_rate_limit_config, FORM_LIMITER
            ),
        },
        sanitizer=ResponseSanitizer(enabled=settings.sanitize_responses),
        csrf_header=csrf.header_name,
        trust_proxy_headers=settings.trust_proxy_headers,
    )


def create_app(
    settings: Settings | None = None, *, csrf_store: CsrfTokenStore | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        csrf_store: Optional token store, e.g. one with a controllable clock.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    pipeline = build_pipeline(settings, csrf_store=csrf_store)
    application.state.settings = settings
    application.state.pipeline = pipeline
    application.state.csrf_store = pipeline.csrf_store

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # The last middleware added is the first to process requests
    cors = settings.cors_config
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
        expose_headers=cors.expose_headers,
        max_age=cors.max_age,
    )
    application.add_middleware(
        OriginGateMiddleware, gate=OriginGate(settings.cors_origins)
    )
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.trust_proxy_headers,
    )
    application.add_middleware(RequestContextMiddleware)
    application.add_middleware(
        SecurityHeadersMiddleware, hsts_enabled=settings.environment == "production"
    )

    application.include_router(api_router)

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
