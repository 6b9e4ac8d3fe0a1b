"""Error model shared by every rejection point in the request pipeline.

Gates and services do not raise to reject a request. They return an
``Err`` (see ``formgate.core.result``) holding a ``Rejection``: an immutable
value with the HTTP status, a machine-readable code, a human message and,
for validation failures, the list of field errors. The API layer renders
every ``Rejection`` into the same error envelope, so clients see one shape
whichever gate said no.

Key components:
- **ErrorCode**: the machine-readable codes clients branch on
- **Severity**: drives log level and alerting for a rejection
- **FieldError**: one violated field, addressed by dotted path
- **Rejection**: the rejection value itself, with one constructor per kind
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class ErrorCode(Enum):
    """Standardized error codes returned in the error envelope."""

    ORIGIN_REJECTED = "ORIGIN_REJECTED"
    """The origin/browser gate refused the request."""

    CSRF_INVALID = "CSRF_INVALID"
    """The CSRF token was missing, unknown, expired or already used."""

    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    """The client exhausted its request budget for the current window."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """The request body failed schema validation."""

    BAD_REQUEST = "BAD_REQUEST"
    """A service refused otherwise valid input."""

    NOT_FOUND = "NOT_FOUND"
    """No route matches the requested path."""

    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    """The route exists but not for this HTTP method."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class Severity(Enum):
    """Severity levels for rejections and errors."""

    LOW = "LOW"
    """Expected during normal operation (bad input, unknown path)."""

    MEDIUM = "MEDIUM"
    """Worth noticing but not an attack signal (rate limiting)."""

    HIGH = "HIGH"
    """Security relevant: forged origin, replayed or missing CSRF token."""

    CRITICAL = "CRITICAL"
    """Unexpected failure inside the service."""


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON shape used in the error envelope."""
        return {"field": self.field, "message": self.message}


_NO_HEADERS: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Rejection:
    """Why a request was refused, in a form every layer can render.

    Args:
        status: HTTP status code to answer with.
        code: Machine-readable error code (an ``ErrorCode`` value or a
            service-specific string such as ``"INVALID_TASK_TYPE"``).
        message: Human-readable message.
        errors: Field-level errors, only for validation failures.
        severity: Controls log level; HIGH and above log as warnings.
        headers: Extra response headers (e.g. ``Retry-After``).
    """

    status: int
    code: str
    message: str
    errors: tuple[FieldError, ...] = ()
    severity: Severity = Severity.LOW
    headers: Mapping[str, str] = field(default=_NO_HEADERS)

    @property
    def should_alert(self) -> bool:
        """True for rejections that look like abuse rather than mistakes."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def with_headers(self, headers: Mapping[str, str]) -> "Rejection":
        """Return a copy carrying additional response headers."""
        merged = {**self.headers, **headers}
        return Rejection(
            status=self.status,
            code=self.code,
            message=self.message,
            errors=self.errors,
            severity=self.severity,
            headers=MappingProxyType(merged),
        )

    @classmethod
    def origin_rejected(cls, message: str) -> "Rejection":
        """403 from the origin/browser gate."""
        return cls(
            403, ErrorCode.ORIGIN_REJECTED.value, message, severity=Severity.HIGH
        )

    @classmethod
    def csrf_invalid(
        cls, message: str = "Invalid or missing CSRF token"
    ) -> "Rejection":
        """403 for a token that cannot be consumed."""
        return cls(403, ErrorCode.CSRF_INVALID.value, message, severity=Severity.HIGH)

    @classmethod
    def rate_limited(
        cls,
        message: str = "Too many requests",
        headers: Mapping[str, str] | None = None,
    ) -> "Rejection":
        """429 once a rate limit window is exhausted."""
        return cls(
            429,
            ErrorCode.RATE_LIMIT_EXCEEDED.value,
            message,
            severity=Severity.MEDIUM,
            headers=MappingProxyType(dict(headers or {})),
        )

    @classmethod
    def validation_failed(cls, errors: Iterable[FieldError]) -> "Rejection":
        """400 carrying every field violation found."""
        return cls(
            400,
            ErrorCode.VALIDATION_ERROR.value,
            "Validation failed",
            errors=tuple(errors),
        )

    @classmethod
    def bad_request(
        cls, message: str, code: str | ErrorCode = ErrorCode.BAD_REQUEST
    ) -> "Rejection":
        """400 raised by a service rule rather than the schema."""
        return cls(400, code.value if isinstance(code, ErrorCode) else code, message)

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> "Rejection":
        """404 for unknown paths."""
        return cls(404, ErrorCode.NOT_FOUND.value, message)

    @classmethod
    def method_not_allowed(cls, message: str = "Method not allowed") -> "Rejection":
        """405 for a known path with the wrong method."""
        return cls(405, ErrorCode.METHOD_NOT_ALLOWED.value, message)

    @classmethod
    def internal(cls, message: str = "Internal server error") -> "Rejection":
        """500 for anything unexpected."""
        return cls(
            500, ErrorCode.INTERNAL_ERROR.value, message, severity=Severity.CRITICAL
        )
