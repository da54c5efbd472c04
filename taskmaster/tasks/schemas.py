from typing import Any
from pydantic import BaseModel, ConfigDict, field_validator


TaskFields = dict[str, Any]

PENDING_STATUS = "pending"


class Task(BaseModel):
    """A stored task.

    Only ``id`` and ``status`` are known to the service; every other
    caller-supplied attribute is kept as an extra field and returned verbatim.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    status: str


class UpdateTaskStatusRequest(BaseModel):
    status: str


class UpdateTaskRequest(BaseModel):
    """Top-level fields to merge into a task. ``status`` may be omitted but not nulled."""

    model_config = ConfigDict(extra="allow")

    status: str | None = None

    @field_validator("status")
    def status_not_null(cls, v: str | None):
        if v is None:
            raise ValueError("status cannot be null")
        return v


class MessageResponse(BaseModel):
    message: str
