"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"

# Truncation for values echoed into logs
MAX_LOGGED_USER_AGENT_LENGTH = 200
