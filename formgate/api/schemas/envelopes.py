"""Response envelopes shared by every endpoint.

Success: ``{"success": true, "data": {...}}``.
Failure: ``{"success": false, "error": {"status", "code", "message",
"errors"?, "details"?}}``, whichever gate or handler produced it.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class FieldErrorModel(BaseModel):
    """One violated field of a request body."""

    field: str = Field(
        ...,
        description="Dotted path of the field",
        examples=["email", "attachments.0.size"],
    )
    message: str = Field(
        ...,
        description="What is wrong with it",
        examples=["Invalid email format"],
    )


class ErrorBody(BaseModel):
    """The ``error`` member of a failure envelope."""

    status: int = Field(..., description="HTTP status code", examples=[403, 429])
    code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["ORIGIN_REJECTED", "CSRF_INVALID", "VALIDATION_ERROR"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid or missing CSRF token"],
    )
    errors: list[FieldErrorModel] | None = Field(
        default=None,
        description="Every violated field (validation failures only)",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Exception details (internal errors outside production only)",
    )


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: Literal[False] = False
    error: ErrorBody

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": False,
                    "error": {
                        "status": 400,
                        "code": "VALIDATION_ERROR",
                        "message": "Validation failed",
                        "errors": [
                            {"field": "name", "message": "Field required"},
                            {"field": "email", "message": "Field required"},
                        ],
                    },
                },
                {
                    "success": False,
                    "error": {
                        "status": 403,
                        "code": "ORIGIN_REJECTED",
                        "message": "Origin not allowed",
                    },
                },
            ]
        }
    }


class SuccessResponse(BaseModel):
    """Success envelope."""

    success: Literal[True] = True
    data: Any = Field(default_factory=dict, description="Endpoint payload")
