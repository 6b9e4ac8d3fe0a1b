"""Type aliases for dynamic data structures throughout the application."""

from typing import Any

# JSON-compatible value: request bodies after parsing, response payloads
# before serialization, and everything the response sanitizer walks.
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Context dictionary for logging additional information
type LogContext = dict[str, Any]

# Context dictionary for error details and debugging information
type ErrorContext = dict[str, Any]
