"""Statistics over an owner's tasks."""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.core.db_client import DatabaseError
from src.core.errors import ServiceError, upstream
from src.core.logging import span
from src.core.stores import TaskStore
from src.domain.task import Task, TaskPriority, TaskStatus


logger = logging.getLogger(__name__)


def _empty_buckets(values: type[TaskStatus] | type[TaskPriority]) -> dict[str, int]:
    return {member.value: 0 for member in values}


class TaskStats(BaseModel):
    """Counts of an owner's tasks by status and by priority."""

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=lambda: _empty_buckets(TaskStatus))
    by_priority: dict[str, int] = Field(default_factory=lambda: _empty_buckets(TaskPriority))

    def to_api(self) -> dict[str, Any]:
        return {"total": self.total, "byStatus": self.by_status, "byPriority": self.by_priority}


def aggregate(tasks: list[Task]) -> TaskStats:
    """Fold once over the tasks.

    Every task counts toward ``total``; a status or priority outside the known
    values is left out of that bucket group rather than rejected.
    """
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.status in stats.by_status:
            stats.by_status[task.status] += 1
        if task.priority in stats.by_priority:
            stats.by_priority[task.priority] += 1
    return stats


async def get_stats(*, task_store: TaskStore, owner_id: str) -> TaskStats | ServiceError:
    """Compute task counts for one owner.

    Returns:
        TaskStats on success, or an UPSTREAM ServiceError if the store fails
    """
    with span("stats_service.get_stats"):
        try:
            tasks = await task_store.find_by_owner(owner_id)
        except (DatabaseError, ValidationError) as e:
            logger.error("get_stats_failed", extra={"account_id": owner_id, "error": str(e)})
            return upstream()

        stats = aggregate(tasks)
        logger.info("Computed task stats", extra={"account_id": owner_id, "total": stats.total})
        return stats
