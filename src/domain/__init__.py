"""Domain models and DTOs."""

from src.domain.account import Account, AccountSummary
from src.domain.create_models import AccountCreate, LoginRequest, TaskCreate
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.update_models import PasswordChange, ProfileUpdate, TaskUpdate


__all__ = [
    "Account",
    "AccountCreate",
    "AccountSummary",
    "LoginRequest",
    "PasswordChange",
    "ProfileUpdate",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
]
