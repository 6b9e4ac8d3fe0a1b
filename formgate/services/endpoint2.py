"""Mock service for ``/endpoint2``."""

import uuid
from datetime import UTC, datetime
from typing import Final

from formgate.api.schemas.endpoint2 import Endpoint2Create, Endpoint2Record
from formgate.core.errors import Rejection
from formgate.core.result import Err, Ok, Result

TASK_TYPES: Final[frozenset[str]] = frozenset({"task1", "task2", "task3"})
DRY_RUN_ID: Final[str] = "dry-run-id"


async def get_data() -> Result[Endpoint2Record]:
    """Return a sample task."""
    return Ok(
        Endpoint2Record(
            id=str(uuid.uuid4()),
            type="task1",
            data={"status": "pending"},
            priority=3,
            tags=["api", "task"],
            created_at=datetime.now(UTC),
        )
    )


async def create_data(payload: Endpoint2Create) -> Result[Endpoint2Record]:
    """Create a task, or only pretend to when ``dryRun`` is set."""
    # Routes validate the type already; this guards callers that skip the schema
    if payload.type not in TASK_TYPES:
        return Err(Rejection.bad_request("Invalid task type", "INVALID_TASK_TYPE"))

    return Ok(
        Endpoint2Record(
            **payload.model_dump(),
            id=DRY_RUN_ID if payload.dry_run else str(uuid.uuid4()),
            created_at=datetime.now(UTC),
        )
    )
