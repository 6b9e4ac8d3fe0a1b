"""Request body validation that reports every violated field at once.

Body schemas are declared as Pydantic models: field types, bounds, patterns,
``Literal`` whitelists, array caps, defaults and ``AfterValidator``
refinements form the constraint tree. ``validate_payload`` is the one place
that interprets it. The outcome is either the normalized model instance or
a ``VALIDATION_ERROR`` rejection listing ``{field, message}`` for every
violation, never a partial result.
"""

from typing import Any, Final

import orjson
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails

from formgate.core.errors import FieldError, Rejection
from formgate.core.result import Err, Ok, Result

ROOT_FIELD: Final[str] = "root"
BODY_FIELD: Final[str] = "body"


def field_path(loc: tuple[int | str, ...]) -> str:
    """Dotted path for an error location, e.g. ``attachments.0.size``."""
    return ".".join(str(part) for part in loc) or ROOT_FIELD


def error_message(error: ErrorDetails) -> str:
    """Human-readable message for one Pydantic error.

    Refinements raise ``ValueError`` with the exact text to show, so their
    message is used without Pydantic's ``"Value error, "`` prefix.
    """
    if error["type"] == "value_error":
        if cause := error.get("ctx", {}).get("error"):
            return str(cause)
    return error["msg"]


def to_field_errors(exc: PydanticValidationError) -> list[FieldError]:
    """Convert a Pydantic validation error into ordered field errors."""
    return [
        FieldError(field=field_path(error["loc"]), message=error_message(error))
        for error in exc.errors()
    ]


def validate_payload[M: BaseModel](schema: type[M], payload: Any) -> Result[M]:  # noqa: ANN401 - parsed JSON of any shape
    """Validate and normalize a parsed request body.

    Args:
        schema: Model declaring the body's constraints.
        payload: Parsed JSON body.

    Returns:
        Result[M]: The model instance, or a rejection with every field error.
    """
    try:
        return Ok(schema.model_validate(payload))
    except PydanticValidationError as exc:
        return Err(Rejection.validation_failed(to_field_errors(exc)))


def parse_json_body(raw: bytes) -> Result[Any]:
    """Parse a request body. An empty body is treated as ``{}``.

    Args:
        raw: Body bytes as received.

    Returns:
        Result[Any]: Parsed JSON, or a rejection naming the ``body`` field.
    """
    if not raw.strip():
        return Ok({})
    try:
        return Ok(orjson.loads(raw))
    except orjson.JSONDecodeError:
        return Err(
            Rejection.validation_failed(
                [FieldError(field=BODY_FIELD, message="Malformed JSON body")]
            )
        )


def check_email(value: str) -> str:
    """Refinement for email fields; returns the normalized address.

    Raises:
        ValueError: If the address is not syntactically valid.
    """
    try:
        return validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise ValueError("Invalid email format") from exc
