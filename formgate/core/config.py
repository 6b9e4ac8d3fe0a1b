"""Centralized configuration management with environment-aware defaults.

Configuration is loaded with Pydantic Settings, giving typed and validated
values sourced from the environment, an optional ``.env`` file, and model
defaults (in that order of precedence). Nested sections use the ``__``
delimiter, e.g. ``CSRF_CONFIG__TTL_SECONDS=600``.

The allowed-origin lists are read as plain comma-separated strings so the
deployment surface stays ``ALLOWED_ORIGINS=https://a.example,https://b.example``.
When unset, ``ALLOWED_ORIGINS`` falls back to the local frontend,
``http://localhost:3000``; deployments are expected to set it.

The application-wide limit is ``RATE_LIMIT_CONFIG__WINDOW_SECONDS`` and
``RATE_LIMIT_CONFIG__MAX_REQUESTS``. The flat ``RATE_LIMIT_WINDOW_MS`` and
``RATE_LIMIT_MAX_REQUESTS`` are still read and, when set, take precedence
(the window rounded up to whole seconds).
"""

import math
import os
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from formgate.core.constants import MILLISECONDS_PER_SECOND


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: ["/favicon.ico"],
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class ObservabilityConfig(BaseModel):
    """OpenTelemetry tracing configuration."""

    enable_tracing: bool = Field(
        default=True,
        description="Enable OpenTelemetry tracing",
    )
    exporter_type: Literal["console", "otlp", "none"] = Field(
        default="console",
        description="Trace exporter type. Defaults to console for development.",
    )
    exporter_endpoint: str | None = Field(
        default=None,
        description="OTLP exporter endpoint",
    )
    trace_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Trace sampling rate (0.0 to 1.0)",
    )

    @field_validator("exporter_endpoint", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class CorsConfig(BaseModel):
    """CORS policy applied to requests that passed the origin gate."""

    allow_credentials: bool = Field(
        default=True,
        description="Whether browsers may send credentials cross-origin",
    )
    allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE"],
        description="Methods allowed for cross-origin requests",
    )
    allow_headers: list[str] = Field(
        default_factory=lambda: [
            "Content-Type",
            "X-CSRF-Token",
            "X-Correlation-ID",
            "X-Request-ID",
        ],
        description="Request headers browsers may send cross-origin",
    )
    expose_headers: list[str] = Field(
        default_factory=lambda: [
            "X-CSRF-Token",
            "X-Correlation-ID",
            "RateLimit-Policy",
            "RateLimit-Limit",
            "RateLimit-Remaining",
            "RateLimit-Reset",
            "Retry-After",
        ],
        description="Response headers readable by browser scripts",
    )
    max_age: int = Field(
        default=600,
        ge=0,
        description="Preflight cache lifetime in seconds",
    )


class CsrfConfig(BaseModel):
    """One-time CSRF token settings."""

    header_name: str = Field(
        default="X-CSRF-Token",
        description="Header carrying the token in both directions",
    )
    token_bytes: int = Field(
        default=32,
        ge=16,
        le=128,
        description="Random bytes per token (hex encoded, so twice as many chars)",
    )
    ttl_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Lifetime of an unconsumed token, measured from issuance",
    )
    max_tokens: int = Field(
        default=10_000,
        ge=1,
        description="Upper bound on live tokens; the oldest are evicted first",
    )


class RateLimitConfig(BaseModel):
    """Fixed-window rate limit parameters."""

    window_seconds: int = Field(
        default=900,
        gt=0,
        description="Window length in seconds",
    )
    max_requests: int = Field(
        default=100,
        gt=0,
        description="Requests allowed per identity per window",
    )
    key_strategy: Literal["ip", "global"] = Field(
        default="ip",
        description="Count per client IP or in one shared bucket",
    )
    message: str = Field(
        default="Too many requests, please try again later.",
        description="Message returned with every 429 response",
    )


def _default_form_rate_limit() -> RateLimitConfig:
    return RateLimitConfig(
        window_seconds=10,
        max_requests=100,
        message="Too many requests, please try again in a few seconds.",
    )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="Formgate", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=True, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=3000, description="API port")
    docs_url: str | None = Field(
        default=None,
        description="Swagger UI URL (the origin gate blocks plain navigation)",
    )
    redoc_url: str | None = Field(default=None, description="ReDoc URL")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema URL"
    )

    # Origin allow-list
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Comma-separated origins allowed to call the API",
    )
    additional_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Extra comma-separated origins appended to allowed_origins",
    )

    # Security configuration
    cors_config: CorsConfig = Field(
        default_factory=CorsConfig, description="CORS configuration"
    )
    csrf_config: CsrfConfig = Field(
        default_factory=CsrfConfig, description="CSRF token configuration"
    )
    rate_limit_config: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Application-wide rate limit",
    )
    rate_limit_window_ms: int | None = Field(
        default=None,
        gt=0,
        description="Flat override of rate_limit_config.window_seconds, in ms",
    )
    rate_limit_max_requests: int | None = Field(
        default=None,
        gt=0,
        description="Flat override of rate_limit_config.max_requests",
    )
    form_rate_limit_config: RateLimitConfig = Field(
        default_factory=_default_form_rate_limit,
        description="Stricter rate limit for form submissions",
    )
    sanitize_responses: bool = Field(
        default=True,
        description="Strip markup from string values in response bodies",
    )

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # Observability configuration
    observability_config: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig, description="Observability configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment == "development" else "json"
            )

        if self.environment == "production":
            if self.observability_config.exporter_type == "console":
                self.observability_config.exporter_type = "otlp"
            if self.observability_config.trace_sample_rate == 1.0:
                self.observability_config.trace_sample_rate = 0.1

        if self.rate_limit_window_ms is not None:
            self.rate_limit_config.window_seconds = math.ceil(
                self.rate_limit_window_ms / MILLISECONDS_PER_SECOND
            )
        if self.rate_limit_max_requests is not None:
            self.rate_limit_config.max_requests = self.rate_limit_max_requests

    @field_validator("allowed_origins", "additional_origins", mode="before")
    @classmethod
    def split_origins(cls, v: str | list[str] | None) -> list[str]:
        """Accept a comma-separated string and drop empty entries."""
        _ = cls
        if v is None:
            return []
        items = v.split(",") if isinstance(v, str) else v
        return [item.strip() for item in items if item and item.strip()]

    @field_validator("docs_url", "redoc_url", "openapi_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v

    @property
    def cors_origins(self) -> list[str]:
        """All allowed origins, base list first, without duplicates."""
        return list(dict.fromkeys([*self.allowed_origins, *self.additional_origins]))

    @property
    def trust_proxy_headers(self) -> bool:
        """Whether X-Forwarded-For / X-Real-IP identify the client."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_port(settings: Settings) -> int:
    """Port to bind, honouring a platform-provided ``PORT`` variable."""
    return int(os.environ.get("PORT", settings.api_port))
