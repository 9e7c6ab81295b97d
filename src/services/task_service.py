"""Task service for owner-scoped create, read, update and delete.

Every lookup checks the owner and reports a foreign task exactly like a missing
one. Update and delete re-verify ownership before writing; that check and the
write are not atomic, so a task deleted in between surfaces as NOT_FOUND.
"""

import logging
from typing import Any

from pydantic import ValidationError

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import ServiceError, invalid_input_from_validation, task_not_found, upstream
from src.core.logging import log_with_user_context, span
from src.core.stores import TaskStore
from src.domain.create_models import TaskCreate
from src.domain.task import Task
from src.domain.update_models import TaskUpdate


logger = logging.getLogger(__name__)


async def _get_owned(*, task_store: TaskStore, owner_id: str, task_id: str) -> Task | None:
    task = await task_store.get_by_id(task_id)
    if task is None or task.owner_id != owner_id:
        return None
    return task


async def create_task(*, task_store: TaskStore, owner_id: str, payload: dict[str, Any]) -> Task | ServiceError:
    """Validate a payload and create a task owned by ``owner_id``.

    Args:
        task_store: Task persistence
        owner_id: Authenticated account ID
        payload: Request body (camelCase or snake_case keys)

    Returns:
        The created Task, or INVALID_INPUT / UPSTREAM ServiceError
    """
    with span("task_service.create_task"):
        try:
            data = TaskCreate.model_validate(payload)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        try:
            task = await task_store.create(owner_id, data.model_dump(mode="json"))
        except (DatabaseError, ValidationError) as e:
            logger.error("create_task_failed", extra={"account_id": owner_id, "error": str(e)})
            return upstream()

        log_with_user_context(logger, "info", "Task created", account_id=owner_id, task_id=task.id)
        return task


async def get_task(*, task_store: TaskStore, owner_id: str, task_id: str) -> Task | ServiceError:
    """Fetch one task if it exists and belongs to ``owner_id``."""
    with span("task_service.get_task"):
        try:
            task = await _get_owned(task_store=task_store, owner_id=owner_id, task_id=task_id)
        except (DatabaseError, ValidationError) as e:
            logger.error("get_task_failed", extra={"account_id": owner_id, "task_id": task_id, "error": str(e)})
            return upstream()

        return task if task is not None else task_not_found()


async def update_task(
    *, task_store: TaskStore, owner_id: str, task_id: str, payload: dict[str, Any]
) -> Task | ServiceError:
    """Apply a partial update to an owned task.

    Only title, description, status, priority and dueDate are updatable, and
    only the keys present in ``payload`` are written. ``dueDate: null`` clears it.
    """
    with span("task_service.update_task"):
        try:
            changes = TaskUpdate.model_validate(payload).model_dump(mode="json", exclude_unset=True)
        except ValidationError as e:
            return invalid_input_from_validation(e)

        try:
            existing = await _get_owned(task_store=task_store, owner_id=owner_id, task_id=task_id)
            if existing is None:
                return task_not_found()
            task = await task_store.update_by_id(task_id, changes)
        except RecordNotFoundError:
            logger.info("Task vanished before update", extra={"account_id": owner_id, "task_id": task_id})
            return task_not_found()
        except (DatabaseError, ValidationError) as e:
            logger.error("update_task_failed", extra={"account_id": owner_id, "task_id": task_id, "error": str(e)})
            return upstream()

        log_with_user_context(
            logger, "info", "Task updated", account_id=owner_id, task_id=task_id, fields=sorted(changes)
        )
        return task


async def delete_task(*, task_store: TaskStore, owner_id: str, task_id: str) -> bool | ServiceError:
    """Delete an owned task."""
    with span("task_service.delete_task"):
        try:
            existing = await _get_owned(task_store=task_store, owner_id=owner_id, task_id=task_id)
            if existing is None:
                return task_not_found()
            await task_store.delete_by_id(task_id)
        except RecordNotFoundError:
            logger.info("Task vanished before delete", extra={"account_id": owner_id, "task_id": task_id})
            return task_not_found()
        except (DatabaseError, ValidationError) as e:
            logger.error("delete_task_failed", extra={"account_id": owner_id, "task_id": task_id, "error": str(e)})
            return upstream()

        log_with_user_context(logger, "info", "Task deleted", account_id=owner_id, task_id=task_id)
        return True
