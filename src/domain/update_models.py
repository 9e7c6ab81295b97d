"""Update models for database operations.

Only fields present in the incoming payload are applied; use
``model_dump(exclude_unset=True)`` to get the partial document.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config import constants
from src.domain.create_models import parse_due_date, validate_description, validate_title
from src.domain.task import TaskPriority, TaskStatus


class TaskUpdate(BaseModel):
    """Partial update payload for a task."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = Field(default=None, alias="dueDate")

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v: Any) -> str:
        return validate_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v: Any) -> str:
        return validate_description(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v: Any) -> date | None:
        return parse_due_date(v)


class ProfileUpdate(BaseModel):
    """Partial update payload for an account profile."""

    name: str = ""
    bio: str = ""
    avatar: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Name cannot be empty")
        v = v.strip()
        if len(v) > constants.ACCOUNT_NAME_MAX_LENGTH:
            raise ValueError(f"Name cannot be more than {constants.ACCOUNT_NAME_MAX_LENGTH} characters")
        return v

    @field_validator("bio", mode="before")
    @classmethod
    def validate_bio(cls, v: Any) -> str:
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("Bio must be a string")
        v = v.strip()
        if len(v) > constants.ACCOUNT_BIO_MAX_LENGTH:
            raise ValueError(f"Bio cannot be more than {constants.ACCOUNT_BIO_MAX_LENGTH} characters")
        return v

    @field_validator("avatar", mode="before")
    @classmethod
    def validate_avatar(cls, v: Any) -> str:
        return "" if v is None else v


class PasswordChange(BaseModel):
    """Payload for changing the account password."""

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("new_password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v) < constants.PASSWORD_MIN_LENGTH:
            raise ValueError(f"New password must be at least {constants.PASSWORD_MIN_LENGTH} characters")
        return v
