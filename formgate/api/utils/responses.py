"""JSON responses and the success/error envelopes.

``ORJSONResponse`` is the application's default response class. The
``*_response`` helpers build the two envelope shapes every endpoint answers
with, so the pipeline, the origin gate middleware and the exception handlers
cannot drift apart.
"""

from collections.abc import Mapping
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from formgate.api.schemas.envelopes import ErrorBody, ErrorResponse, SuccessResponse
from formgate.core.errors import Rejection


class ORJSONResponse(JSONResponse):
    """JSONResponse serialized with orjson.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")
        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)


def error_envelope(
    rejection: Rejection, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """The JSON error envelope for a rejection.

    Args:
        rejection: What went wrong.
        details: Extra diagnostics, only ever passed outside production.

    Returns:
        dict[str, Any]: ``{"success": False, "error": {...}}``.
    """
    body = ErrorResponse(
        error=ErrorBody(
            status=rejection.status,
            code=rejection.code,
            message=rejection.message,
            errors=[error.to_dict() for error in rejection.errors] or None,
            details=details,
        )
    )
    return body.model_dump(mode="json", exclude_none=True)


def success_envelope(data: Any) -> dict[str, Any]:  # noqa: ANN401 - JSON-compatible payload
    """The JSON success envelope around ``data``."""
    return SuccessResponse(data=data).model_dump(mode="json")


def rejection_response(
    rejection: Rejection, details: dict[str, Any] | None = None
) -> ORJSONResponse:
    """Render a rejection as an error envelope response with its headers."""
    return ORJSONResponse(
        status_code=rejection.status,
        content=error_envelope(rejection, details),
        headers=dict(rejection.headers) or None,
    )


def envelope_response(
    content: dict[str, Any],
    *,
    status_code: int,
    headers: Mapping[str, str] | None = None,
) -> ORJSONResponse:
    """Wrap an already-built envelope in a response."""
    return ORJSONResponse(
        status_code=status_code,
        content=content,
        headers=dict(headers) if headers else None,
    )
