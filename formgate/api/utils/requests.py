"""Helpers for reading client details off a request."""

from starlette.requests import Request

from formgate.core.constants import MAX_LOGGED_USER_AGENT_LENGTH


def get_client_ip(request: Request, *, trust_proxy_headers: bool = False) -> str:
    """Extract the client IP, considering proxy headers when trusted.

    Proxy headers are only honoured behind a trusted reverse proxy
    (production); otherwise any client could pick its own rate limit key.

    Args:
        request: The incoming request.
        trust_proxy_headers: Read X-Forwarded-For / X-Real-IP first.

    Returns:
        str: The client IP address, or ``"unknown"``.
    """
    if trust_proxy_headers:
        if forwarded_for := request.headers.get("x-forwarded-for"):
            return forwarded_for.split(",")[0].strip()
        if real_ip := request.headers.get("x-real-ip"):
            return real_ip.strip()

    if request.client:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    """User agent truncated for logging."""
    ua = request.headers.get("user-agent", "")
    return ua[:MAX_LOGGED_USER_AGENT_LENGTH] if ua else "unknown"
