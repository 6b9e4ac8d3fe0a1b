"""End-to-end tests of the token-then-submit flow."""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

TokenFetcher = Callable[[], Awaitable[str]]

CONTACT = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "category": "support",
    "description": "Cannot log in since yesterday",
}


@pytest.mark.integration
class TestCsrfEndpoint:
    """Test GET /csrf."""

    async def test_returns_token_and_empty_data(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that /csrf answers with an empty envelope and a token header."""
        response = await client.get("/csrf", headers=browser_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}
        assert len(response.headers["X-CSRF-Token"]) == 64

    async def test_every_get_issues_a_new_token(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that tokens are never reused across responses."""
        first = await client.get("/csrf", headers=browser_headers)
        second = await client.get("/endpoint1", headers=browser_headers)

        assert first.headers["X-CSRF-Token"] != second.headers["X-CSRF-Token"]

    async def test_rate_limit_headers(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that responses report the remaining budget."""
        response = await client.get("/csrf", headers=browser_headers)

        assert response.headers["RateLimit-Limit"] == "100"
        assert response.headers["RateLimit-Remaining"] == "99"
        assert response.headers["RateLimit-Policy"] == "100;w=900"


@pytest.mark.integration
class TestEndpoint1:
    """Test /endpoint1."""

    async def test_get_sample(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that the sample record is served with camelCase keys."""
        response = await client.get("/endpoint1", headers=browser_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "John Doe"
        assert "createdAt" in data
        assert "X-CSRF-Token" in response.headers

    async def test_submit_with_token(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test the happy path: fetch a token, submit, get 201."""
        token = await fetch_token()

        response = await client.post(
            "/endpoint1",
            json=CONTACT,
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Jane Doe"
        assert body["data"]["priority"] == 3
        assert body["data"]["id"]
        assert "X-CSRF-Token" not in response.headers

    async def test_token_cannot_be_replayed(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that the second use of a token is refused."""
        headers = {**browser_headers, "X-CSRF-Token": await fetch_token()}
        await client.post("/endpoint1", json=CONTACT, headers=headers)

        response = await client.post("/endpoint1", json=CONTACT, headers=headers)

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "error": {
                "status": 403,
                "code": "CSRF_INVALID",
                "message": "Invalid or missing CSRF token",
            },
        }

    async def test_submit_without_token(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that a submission without a token is refused."""
        response = await client.post(
            "/endpoint1", json=CONTACT, headers=browser_headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "CSRF_INVALID"

    async def test_validation_errors_listed(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that a bad body yields 400 with every field error."""
        token = await fetch_token()

        response = await client.post(
            "/endpoint1",
            json={"category": "general", "email": "not-an-email"},
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Validation failed"
        assert {"field": "email", "message": "Invalid email format"} in error["errors"]
        assert {e["field"] for e in error["errors"]} == {"name", "email"}

    async def test_failed_validation_spends_the_token(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that a token used on an invalid body cannot be reused."""
        headers = {**browser_headers, "X-CSRF-Token": await fetch_token()}
        await client.post("/endpoint1", json={}, headers=headers)

        response = await client.post("/endpoint1", json=CONTACT, headers=headers)

        assert response.status_code == 403

    async def test_markup_is_stripped_from_response(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that echoed values come back without markup."""
        token = await fetch_token()
        payload = {
            **CONTACT,
            "name": "<b>Jane</b><script>alert(1)</script>",
            "description": "Hello <img src=x onerror=alert(1)>there, friend",
        }

        response = await client.post(
            "/endpoint1",
            json=payload,
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        data = response.json()["data"]
        assert data["name"] == "Jane"
        assert data["description"] == "Hello there, friend"


@pytest.mark.integration
class TestEndpoint2:
    """Test /endpoint2."""

    async def test_get_sample(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test that the sample task is served."""
        response = await client.get("/endpoint2", headers=browser_headers)

        assert response.status_code == 200
        assert response.json()["data"]["type"] == "task1"

    async def test_dry_run(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that dryRun is honoured and echoed in camelCase."""
        token = await fetch_token()

        response = await client.post(
            "/endpoint2",
            json={"type": "task2", "data": {"a": 1}, "dryRun": True},
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == "dry-run-id"
        assert data["dryRun"] is True
        assert data["data"] == {"a": 1}

    async def test_invalid_type(
        self,
        client: AsyncClient,
        browser_headers: dict[str, str],
        fetch_token: TokenFetcher,
    ) -> None:
        """Test that an unknown task type is a validation error."""
        token = await fetch_token()

        response = await client.post(
            "/endpoint2",
            json={"type": "task7", "data": {}},
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        assert response.status_code == 400
        assert response.json()["error"]["errors"][0]["field"] == "type"


@pytest.mark.integration
class TestScenario:
    """The documented happy path, step by step."""

    async def test_fetch_token_then_submit(
        self, client: AsyncClient, browser_headers: dict[str, str]
    ) -> None:
        """Test GET /csrf followed by POST /endpoint1 with that token."""
        # Arrange
        csrf = await client.get("/csrf", headers=browser_headers)
        token = csrf.headers["X-CSRF-Token"]

        # Act
        response = await client.post(
            "/endpoint1",
            json={"name": "Al", "email": "a@b.com", "category": "general", "priority": 3},
            headers={**browser_headers, "X-CSRF-Token": token},
        )

        # Assert
        assert csrf.status_code == 200
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"]
        assert body["data"]["name"] == "Al"
