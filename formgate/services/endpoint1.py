"""Mock service for ``/endpoint1``."""

import uuid
from datetime import UTC, datetime

from formgate.api.schemas.endpoint1 import Endpoint1Create, Endpoint1Record
from formgate.core.result import Ok, Result


async def get_data() -> Result[Endpoint1Record]:
    """Return a sample submission."""
    return Ok(
        Endpoint1Record(
            id=str(uuid.uuid4()),
            name="John Doe",
            email="john@example.com",
            category="general",
            created_at=datetime.now(UTC),
        )
    )


async def create_data(payload: Endpoint1Create) -> Result[Endpoint1Record]:
    """Echo a validated submission back as a newly created record."""
    return Ok(
        Endpoint1Record(
            **payload.model_dump(),
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
        )
    )
