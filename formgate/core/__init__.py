"""Core package for cross-cutting application functionality.

- **config**: Settings loaded from the environment with Pydantic Settings
- **context**: Request context and correlation ID management
- **errors**: Error codes, severities and the ``Rejection`` value
- **result**: ``Ok``/``Err`` values threaded through the request pipeline
- **error_context**: Sensitive data redaction for safe logging
- **logging**: Loguru setup with console and JSON formatters
- **observability**: OpenTelemetry tracing
- **types**: Type aliases for JSON-shaped data
"""
