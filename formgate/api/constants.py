"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Methods that never change state; they mint CSRF tokens instead of spending them
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
# Methods that must present a CSRF token and may carry a body
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds
