"""Task domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(StrEnum):
    """Task progress state."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    """Task priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(BaseModel):
    """Task data transfer object.

    ``status`` and ``priority`` are plain strings here: documents read back from
    the store are loaded as-is, so values outside the enums stay observable to
    listing and statistics. Input validation lives in ``TaskCreate``/``TaskUpdate``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique task ID from the document store")
    owner_id: str = Field(..., description="Account ID of the task owner (immutable)")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    status: str = Field(default=TaskStatus.PENDING.value, description="pending, in-progress or completed")
    priority: str = Field(default=TaskPriority.MEDIUM.value, description="low, medium or high")
    due_date: str | None = Field(default=None, description="Due date (ISO date) or null")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")

    def to_api(self) -> dict:
        """Serialise with camelCase keys for the HTTP surface."""
        return self.model_dump(mode="json", by_alias=True)
