"""Admission checks applied to requests before they reach a handler.

- **origin_gate**: browser fingerprint and origin allow-list check
- **csrf**: one-time CSRF token store
- **rate_limiter**: fixed-window request budgets per client
- **validation**: body parsing and schema validation with field errors
- **sanitizer**: markup stripping for outbound payloads

Each check returns ``Ok``/``Err`` values; ``formgate.api.pipeline`` decides
their order and turns rejections into HTTP responses.
"""
