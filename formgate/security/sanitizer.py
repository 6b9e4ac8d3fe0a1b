"""Strip markup from every string in an outbound payload.

Policy: no tags are allowed. ``<script>`` elements are removed together with
their content; any other tag is removed and its text kept; stray ``<``, ``>``
and ``&`` are escaped by ``bleach``. Dict keys, list order and non-string
values pass through untouched. Sanitizing already-sanitized output returns
it unchanged.
"""

import re
from typing import Final

import bleach

from formgate.core.types import JsonValue

_CLOSED_SCRIPT: Final[re.Pattern[str]] = re.compile(
    r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL
)
# An opening tag with no end tag swallows the rest of the string in a browser
_UNTERMINATED_SCRIPT: Final[re.Pattern[str]] = re.compile(
    r"<script\b.*\Z", re.IGNORECASE | re.DOTALL
)


def strip_script_blocks(text: str) -> str:
    """Remove script elements and their bodies, including nested leftovers."""
    previous = None
    while previous != text:
        previous = text
        text = _CLOSED_SCRIPT.sub("", text)
    return _UNTERMINATED_SCRIPT.sub("", text)


def clean_text(text: str) -> str:
    """Sanitize one string under the no-tags policy."""
    return bleach.clean(strip_script_blocks(text), tags=set(), strip=True)


class ResponseSanitizer:
    """Recursively sanitize JSON-shaped response payloads.

    Args:
        enabled: When False, payloads are returned as-is.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled

    def sanitize(self, value: JsonValue) -> JsonValue:
        """Return a sanitized copy of ``value``.

        Args:
            value: Parsed JSON payload (dicts, lists and scalars).

        Returns:
            JsonValue: Same structure with every string leaf cleaned.
        """
        if not self.enabled:
            return value
        return self._walk(value)

    def _walk(self, value: JsonValue) -> JsonValue:
        if isinstance(value, str):
            return clean_text(value)
        if isinstance(value, list):
            return [self._walk(item) for item in value]
        if isinstance(value, dict):
            return {key: self._walk(item) for key, item in value.items()}
        return value
