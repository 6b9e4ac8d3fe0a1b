"""Root conftest.py for the Formgate test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Generator

import pytest

from formgate.core.config import Settings, get_settings
from formgate.core.context import RequestContext
from formgate.core.error_context import _get_sensitive_fields

ALLOWED_ORIGIN = "http://localhost:3000"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Make sure no correlation ID leaks between tests."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for one allowed origin with tracing switched off.

    Returns:
        Settings: Development settings with default limits.
    """
    return Settings(
        environment="development",
        allowed_origins=[ALLOWED_ORIGIN],
        observability_config={"enable_tracing": False},
    )


@pytest.fixture
def browser_headers() -> dict[str, str]:
    """Headers a browser page on the allowed origin sends with fetch().

    Returns:
        dict[str, str]: Origin, user agent and Fetch Metadata headers.
    """
    return {
        "Origin": ALLOWED_ORIGIN,
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/130.0",
        "Sec-Fetch-Site": "same-site",
        "Sec-Fetch-Mode": "cors",
    }
