"""Shared fixtures for integration tests.

Every test gets its own application instance, and with it a fresh CSRF
token store and fresh rate limit counters.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from formgate.api.main import create_app
from formgate.core.config import Settings

ClientFactoryType = Callable[[Settings], Awaitable[AsyncClient]]


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Application built from the test settings."""
    return create_app(test_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client talking to the test application in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client


@pytest.fixture
async def client_factory() -> AsyncGenerator[ClientFactoryType]:
    """Factory for clients bound to apps built from custom settings.

    Usage:
        async def test_something(client_factory):
            client = await client_factory(Settings(...))
    """
    clients: list[AsyncClient] = []

    async def _create_client(settings: Settings) -> AsyncClient:
        application = create_app(settings)
        test_client = AsyncClient(
            transport=ASGITransport(app=application), base_url="http://test"
        )
        clients.append(test_client)
        return test_client

    yield _create_client

    for test_client in clients:
        await test_client.aclose()


@pytest.fixture
def fetch_token(
    client: AsyncClient, browser_headers: dict[str, str]
) -> Callable[[], Awaitable[str]]:
    """Fetch a fresh CSRF token the way the frontend does."""

    async def _fetch() -> str:
        response = await client.get("/csrf", headers=browser_headers)
        assert response.status_code == 200
        return response.headers["X-CSRF-Token"]

    return _fetch
