"""Bodies and records for ``/endpoint2`` (task submissions)."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from formgate.api.schemas.endpoint1 import Priority

TASK_TYPE_PATTERN = r"^(task1|task2|task3)$"


def reject_test_tasks(value: str) -> str:
    """Refinement: task types must not contain ``test``."""
    if "test" in value:
        raise ValueError('Task type cannot include "test" in production')
    return value


TaskType = Annotated[
    str, Field(pattern=TASK_TYPE_PATTERN), AfterValidator(reject_test_tasks)
]


class Endpoint2Create(BaseModel):
    """Body of ``POST /endpoint2``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: TaskType
    data: dict[str, Any]
    priority: Priority = 3
    tags: Annotated[list[str], Field(max_length=10)] | None = None
    dry_run: bool | None = Field(default=None, alias="dryRun")


class Endpoint2Record(BaseModel):
    """A created (mock) task as returned to clients."""

    id: str
    type: str
    data: dict[str, Any]
    priority: int
    tags: list[str] | None = None
    dry_run: bool | None = Field(default=None, serialization_alias="dryRun")
    created_at: datetime = Field(serialization_alias="createdAt")
