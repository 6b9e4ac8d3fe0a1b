"""Unit tests for the mock services."""

import pytest

from formgate.api.schemas.endpoint1 import Endpoint1Create, Endpoint1Record
from formgate.api.schemas.endpoint2 import Endpoint2Create, Endpoint2Record
from formgate.core.result import Err, Ok
from formgate.services import endpoint1, endpoint2


@pytest.mark.unit
class TestEndpoint1Service:
    """Test the endpoint1 service."""

    async def test_get_data(self) -> None:
        """Test that a sample record is returned."""
        result = await endpoint1.get_data()

        assert isinstance(result, Ok)
        assert isinstance(result.value, Endpoint1Record)
        assert result.value.name == "John Doe"

    async def test_create_echoes_payload(self) -> None:
        """Test that the created record carries the submitted fields."""
        payload = Endpoint1Create(
            name="Jane", email="jane@example.com", category="billing", priority=5
        )

        result = await endpoint1.create_data(payload)

        assert isinstance(result, Ok)
        assert result.value.name == "Jane"
        assert result.value.priority == 5
        assert result.value.id

    async def test_created_at_serializes_camel_case(self) -> None:
        """Test that timestamps are exposed as createdAt."""
        result = await endpoint1.get_data()

        assert isinstance(result, Ok)
        dumped = result.value.model_dump(mode="json", by_alias=True)
        assert "createdAt" in dumped
        assert "created_at" not in dumped


@pytest.mark.unit
class TestEndpoint2Service:
    """Test the endpoint2 service."""

    async def test_get_data(self) -> None:
        """Test that a sample task is returned."""
        result = await endpoint2.get_data()

        assert isinstance(result, Ok)
        assert isinstance(result.value, Endpoint2Record)
        assert result.value.type == "task1"

    async def test_dry_run_uses_fixed_id(self) -> None:
        """Test that a dry run does not allocate a real id."""
        payload = Endpoint2Create(type="task1", data={}, dryRun=True)

        result = await endpoint2.create_data(payload)

        assert isinstance(result, Ok)
        assert result.value.id == endpoint2.DRY_RUN_ID
        assert result.value.model_dump(by_alias=True)["dryRun"] is True

    async def test_real_run_allocates_id(self) -> None:
        """Test that a normal submission gets a fresh id."""
        payload = Endpoint2Create(type="task3", data={"k": 1})

        result = await endpoint2.create_data(payload)

        assert isinstance(result, Ok)
        assert result.value.id != endpoint2.DRY_RUN_ID

    async def test_unknown_type_rejected(self) -> None:
        """Test the service-level check on task types."""
        payload = Endpoint2Create.model_construct(type="task9", data={}, priority=3)

        result = await endpoint2.create_data(payload)

        assert isinstance(result, Err)
        assert result.rejection.status == 400
        assert result.rejection.code == "INVALID_TASK_TYPE"
