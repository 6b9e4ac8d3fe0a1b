"""Unit tests for formgate/security/origin_gate.py."""

from collections.abc import Callable

import pytest
from starlette.datastructures import Headers

from formgate.core.errors import ErrorCode
from formgate.core.result import Err, Ok
from formgate.security.origin_gate import (
    MISSING_ORIGIN_MESSAGE,
    NOT_A_BROWSER_MESSAGE,
    ORIGIN_NOT_ALLOWED_MESSAGE,
    OriginGate,
)

HeaderFactory = Callable[..., dict[str, str]]


@pytest.fixture
def gate() -> OriginGate:
    """Gate allowing the local development origin only."""
    return OriginGate(["http://localhost:3000"])


@pytest.mark.unit
class TestOriginGate:
    """Test the three header checks and their order."""

    def test_admits_browser_request_from_allowed_origin(
        self, gate: OriginGate, make_headers: HeaderFactory
    ) -> None:
        """Test that a complete browser request is admitted with its origin."""
        assert gate.check(make_headers()) == Ok("http://localhost:3000")

    @pytest.mark.parametrize("missing", ["origin", "user_agent"])
    def test_missing_origin_or_user_agent(
        self, gate: OriginGate, make_headers: HeaderFactory, missing: str
    ) -> None:
        """Test that a request without Origin or User-Agent is rejected first."""
        result = gate.check(make_headers(**{missing: None}))

        assert isinstance(result, Err)
        assert result.rejection.status == 403
        assert result.rejection.code == ErrorCode.ORIGIN_REJECTED.value
        assert result.rejection.message == MISSING_ORIGIN_MESSAGE

    def test_empty_origin_counts_as_missing(
        self, gate: OriginGate, make_headers: HeaderFactory
    ) -> None:
        """Test that an empty Origin header is treated as absent."""
        result = gate.check(make_headers(origin=""))

        assert isinstance(result, Err)
        assert result.rejection.message == MISSING_ORIGIN_MESSAGE

    @pytest.mark.parametrize("missing", ["sec_fetch_site", "sec_fetch_mode"])
    def test_missing_fetch_metadata(
        self, gate: OriginGate, make_headers: HeaderFactory, missing: str
    ) -> None:
        """Test that requests without Fetch Metadata are not treated as browsers."""
        result = gate.check(make_headers(**{missing: None}))

        assert isinstance(result, Err)
        assert result.rejection.message == NOT_A_BROWSER_MESSAGE

    def test_origin_not_in_allow_list(
        self, gate: OriginGate, make_headers: HeaderFactory
    ) -> None:
        """Test that a browser request from a foreign origin is rejected."""
        result = gate.check(make_headers(origin="https://evil.example"))

        assert isinstance(result, Err)
        assert result.rejection.message == ORIGIN_NOT_ALLOWED_MESSAGE

    @pytest.mark.parametrize(
        "origin",
        [
            "http://localhost:3001",
            "https://localhost:3000",
            "http://localhost:3000/",
            "http://LOCALHOST:3000",
        ],
    )
    def test_origin_match_is_exact(
        self, gate: OriginGate, make_headers: HeaderFactory, origin: str
    ) -> None:
        """Test that scheme, host and port must match the allow-list exactly."""
        assert isinstance(gate.check(make_headers(origin=origin)), Err)

    def test_first_failing_check_wins(
        self, gate: OriginGate, make_headers: HeaderFactory
    ) -> None:
        """Test that a missing user agent is reported before missing metadata."""
        headers = make_headers(
            origin="https://evil.example", user_agent=None, sec_fetch_site=None
        )

        result = gate.check(headers)

        assert isinstance(result, Err)
        assert result.rejection.message == MISSING_ORIGIN_MESSAGE

    def test_accepts_starlette_headers(self, gate: OriginGate) -> None:
        """Test that header lookups are case-insensitive with Starlette Headers."""
        headers = Headers(
            {
                "Origin": "http://localhost:3000",
                "User-Agent": "Mozilla/5.0",
                "Sec-Fetch-Site": "same-origin",
                "Sec-Fetch-Mode": "cors",
            }
        )

        assert isinstance(gate.check(headers), Ok)

    def test_allow_list_is_frozen(self) -> None:
        """Test that the gate keeps its own immutable copy of the origins."""
        origins = ["http://localhost:3000"]
        gate = OriginGate(origins)
        origins.append("https://evil.example")

        assert gate.allowed_origins == frozenset({"http://localhost:3000"})

    def test_rejections_alert(self, gate: OriginGate, make_headers: HeaderFactory) -> None:
        """Test that origin rejections are logged as security events."""
        result = gate.check(make_headers(origin=None))

        assert isinstance(result, Err)
        assert result.rejection.should_alert is True
