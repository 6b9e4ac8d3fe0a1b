"""Shared fixtures for unit tests."""

from collections.abc import Callable
from typing import cast

import pytest
from pytest_mock import MockerFixture, MockType

from formgate.core.config import Settings


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment variables.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.delenv("PORT", raising=False)
    return Settings()


@pytest.fixture
def mock_app(mocker: MockerFixture) -> MockType:
    """Provide a mock ASGI app for middleware construction.

    Returns:
        MockType: Mock app.
    """
    return cast("MockType", mocker.Mock())


@pytest.fixture
def mock_uvicorn(mocker: MockerFixture) -> MockType:
    """Mock uvicorn.run to prevent server startup.

    Returns:
        MockType: The mock for assertion purposes.
    """
    return mocker.patch("uvicorn.run")


@pytest.fixture
def make_headers() -> Callable[..., dict[str, str]]:
    """Build a lower-case header mapping from browser defaults plus overrides.

    Pass a value of None to drop a header.

    Returns:
        Callable[..., dict[str, str]]: Header factory.
    """

    def _make(**overrides: str | None) -> dict[str, str]:
        headers: dict[str, str | None] = {
            "origin": "http://localhost:3000",
            "user-agent": "Mozilla/5.0",
            "sec-fetch-site": "same-site",
            "sec-fetch-mode": "cors",
        }
        for key, value in overrides.items():
            headers[key.replace("_", "-")] = value
        return {key: value for key, value in headers.items() if value is not None}

    return _make
