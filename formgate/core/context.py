"""Identifiers of the request currently being handled.

Two middlewares fill them in: ``RequestContextMiddleware`` binds the
correlation ID, which callers may carry across services, and
``RequestLoggingMiddleware`` binds the per-request ID. Everything below them
(the admission pipeline, the gate, the exception handlers) reads the IDs back
to tag rejections and error logs without the request being passed down.
"""

import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Final

REQUEST_ID_PREFIX: Final[str] = "req-"


@dataclass(frozen=True, slots=True)
class RequestIds:
    """IDs bound to the current request; unset ones are None."""

    correlation_id: str | None = None
    request_id: str | None = None

    def as_fields(self) -> dict[str, str]:
        """The IDs that are set, keyed for log lines and span attributes."""
        fields = {"correlation_id": self.correlation_id, "request_id": self.request_id}
        return {key: value for key, value in fields.items() if value}


_NO_IDS: Final[RequestIds] = RequestIds()
_request_ids: ContextVar[RequestIds] = ContextVar("request_ids", default=_NO_IDS)


class RequestContext:
    """Async-safe access to the current ``RequestIds``.

    ``bind`` layers IDs over the ones already set and returns a token; the
    middleware that bound them resets it once its request is done, so an
    inner binding never outlives the request.
    """

    @staticmethod
    def current() -> RequestIds:
        return _request_ids.get()

    @staticmethod
    def bind(
        *, correlation_id: str | None = None, request_id: str | None = None
    ) -> Token[RequestIds]:
        """Set the given IDs, keeping the others.

        Args:
            correlation_id: Correlation ID to set, if any.
            request_id: Request ID to set, if any.

        Returns:
            Token[RequestIds]: Pass to ``reset`` to restore the previous IDs.
        """
        changes = {
            key: value
            for key, value in (
                ("correlation_id", correlation_id),
                ("request_id", request_id),
            )
            if value is not None
        }
        return _request_ids.set(replace(_request_ids.get(), **changes))

    @staticmethod
    def reset(token: Token[RequestIds]) -> None:
        _request_ids.reset(token)

    @staticmethod
    def get_correlation_id() -> str | None:
        return _request_ids.get().correlation_id

    @staticmethod
    def get_request_id() -> str | None:
        return _request_ids.get().request_id

    @staticmethod
    def clear() -> None:
        _request_ids.set(_NO_IDS)


def generate_id(prefix: str = "") -> str:
    """Random UUID4 string, optionally prefixed.

    Examples:
        >>> generate_id(REQUEST_ID_PREFIX).startswith("req-")
        True
    """
    return f"{prefix}{uuid.uuid4()}"
