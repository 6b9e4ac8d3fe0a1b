"""Header-based admission filter that runs before any other processing.

The gate rejects requests that do not look like they came from a browser
page on an allowed origin. It only reads headers, so it is the cheapest check
in the pipeline and runs first. It does not replace CSRF protection: the
headers are trivially forged by a determined client. It does keep plain
scripted clients and foreign sites from ever being issued a CSRF token.
"""

from collections.abc import Iterable, Mapping
from typing import Final

from formgate.core.errors import Rejection
from formgate.core.result import Err, Ok, Result

MISSING_ORIGIN_MESSAGE: Final[str] = "Invalid request: missing origin or user agent"
NOT_A_BROWSER_MESSAGE: Final[str] = "Invalid request: not from a browser"
ORIGIN_NOT_ALLOWED_MESSAGE: Final[str] = "Origin not allowed"


class OriginGate:
    """Admit only browser requests from an exact-match allow-list of origins.

    Args:
        allowed_origins: Origins (scheme, host and port) allowed to call the
            API. Frozen at construction.
    """

    def __init__(self, allowed_origins: Iterable[str]) -> None:
        self.allowed_origins = frozenset(allowed_origins)

    def check(self, headers: Mapping[str, str]) -> Result[str]:
        """Decide whether a request may proceed, from its headers alone.

        Checks run in order and the first failure wins:

        1. ``Origin`` and ``User-Agent`` are present.
        2. ``Sec-Fetch-Site`` and ``Sec-Fetch-Mode`` are present (modern
           browsers always send them).
        3. ``Origin`` is in the allow-list.

        Args:
            headers: Request headers. Lookups use lower-case names, so pass
                a case-insensitive mapping (Starlette ``Headers``) or a dict
                with lower-case keys.

        Returns:
            Result[str]: ``Ok(origin)`` or an ``ORIGIN_REJECTED`` rejection.
        """
        origin = headers.get("origin")
        if not origin or not headers.get("user-agent"):
            return Err(Rejection.origin_rejected(MISSING_ORIGIN_MESSAGE))

        if not headers.get("sec-fetch-site") or not headers.get("sec-fetch-mode"):
            return Err(Rejection.origin_rejected(NOT_A_BROWSER_MESSAGE))

        if origin not in self.allowed_origins:
            return Err(Rejection.origin_rejected(ORIGIN_NOT_ALLOWED_MESSAGE))

        return Ok(origin)
