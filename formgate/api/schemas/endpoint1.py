"""Bodies and records for ``/endpoint1`` (contact-style form submissions)."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from formgate.security.validation import check_email

MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024

Name = Annotated[str, Field(min_length=2, max_length=100)]
Email = Annotated[str, Field(max_length=100), AfterValidator(check_email)]
Priority = Annotated[int, Field(ge=1, le=5)]
Category = Literal["general", "support", "billing", "technical"]


class Attachment(BaseModel):
    """File metadata attached to a submission (the file itself is not sent)."""

    filename: str
    size: Annotated[int, Field(ge=0, le=MAX_ATTACHMENT_BYTES)]
    type: Annotated[str, Field(pattern=r"^(image|document)/.*$")]


class Endpoint1Create(BaseModel):
    """Body of ``POST /endpoint1``. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    name: Name
    email: Email
    description: Annotated[str, Field(min_length=10, max_length=1000)] | None = None
    category: Category
    priority: Priority = 3
    attachments: Annotated[list[Attachment], Field(max_length=5)] | None = None


class Endpoint1Record(BaseModel):
    """A stored (mock) submission as returned to clients."""

    id: str
    name: str
    email: str
    category: str | None = None
    description: str | None = None
    priority: int | None = None
    attachments: list[Attachment] | None = None
    created_at: datetime = Field(serialization_alias="createdAt")
