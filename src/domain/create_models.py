"""Pydantic models for validating new records before they reach the store."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from src.core.config import constants
from src.domain.task import TaskPriority, TaskStatus


def parse_due_date(value: Any) -> date | None:
    """Accept an ISO date or ISO datetime string; empty means no due date."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("Due date must be an ISO 8601 date")
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError as err:
        raise ValueError("Due date must be an ISO 8601 date") from err


def validate_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Title is required")
    value = value.strip()
    if len(value) > constants.TASK_TITLE_MAX_LENGTH:
        raise ValueError(f"Title cannot be more than {constants.TASK_TITLE_MAX_LENGTH} characters")
    return value


def validate_description(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("Description must be a string")
    value = value.strip()
    if len(value) > constants.TASK_DESCRIPTION_MAX_LENGTH:
        raise ValueError(f"Description cannot be more than {constants.TASK_DESCRIPTION_MAX_LENGTH} characters")
    return value


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(default=None, validate_default=True, description="Task title (1-100 characters)")
    description: str = Field(default="", description="Task description (max 500 characters)")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Initial status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority level")
    due_date: date | None = Field(default=None, alias="dueDate", description="Optional due date")

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v: Any) -> str:
        return validate_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v: Any) -> str:
        return validate_description(v)

    @field_validator("status", "priority", mode="before")
    @classmethod
    def default_when_blank(cls, v: Any, info: ValidationInfo) -> Any:
        """Missing, null or empty enum values fall back to the field default."""
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def validate_due_date(cls, v: Any) -> date | None:
        return parse_due_date(v)


class AccountCreate(BaseModel):
    """Pydantic model for a registration request."""

    name: str = Field(..., description="Display name (1-50 characters)")
    email: EmailStr = Field(..., description="Email address, unique case-insensitively")
    password: str = Field(..., description="Plain-text password (min 6 characters)")

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Name is required")
        v = v.strip()
        if len(v) > constants.ACCOUNT_NAME_MAX_LENGTH:
            raise ValueError(f"Name cannot be more than {constants.ACCOUNT_NAME_MAX_LENGTH} characters")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        if len(v) < constants.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {constants.PASSWORD_MIN_LENGTH} characters")
        return v


class LoginRequest(BaseModel):
    """Pydantic model for a login request."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, description="Plain-text password")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v
