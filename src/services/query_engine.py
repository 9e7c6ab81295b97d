"""Query engine for listing an owner's tasks.

The task store can only filter on ``owner_id``, so every richer query runs here
over a materialised per-owner snapshot:

- Filtering: status, priority and free-text search, each an independent
  predicate (a task must pass all active ones).
- Sorting: a single key; ``priority`` sorts by rank (high > medium > low).
- Pagination: offset/limit over the sorted set; ``total`` is counted before paging.

Key Concepts:
- Tie order: the comparator is two-way and never reports equality, so tasks
  with equal sort keys come back in an unspecified relative order. Callers
  needing a stable order must not rely on one.
- Out-of-range pages are not an error: they return no items while ``total``
  and ``total_pages`` still describe the whole filtered set.
"""

import logging
import math
from collections.abc import Callable
from functools import cmp_to_key
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.config import constants
from src.core.db_client import DatabaseError
from src.core.errors import ServiceError, upstream
from src.core.logging import span
from src.core.stores import TaskStore
from src.domain.task import Task


logger = logging.getLogger(__name__)

ALL = "all"

# API sort names -> Task attribute names
SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "dueDate": "due_date",
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
}


class TaskQuery(BaseModel):
    """Caller-supplied filter, sort and page parameters."""

    status: str | None = None
    priority: str | None = None
    search: str | None = None
    sort_by: str = constants.DEFAULT_SORT_FIELD
    order: str = constants.DEFAULT_SORT_ORDER
    page: int = Field(default=constants.DEFAULT_PAGE, ge=1)
    limit: int = Field(default=constants.DEFAULT_PAGE_LIMIT, ge=1)

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        """Oversized page sizes are served at the maximum rather than rejected."""
        return min(v, constants.MAX_PAGE_LIMIT)


class TaskPage(BaseModel):
    """One page of an owner's filtered, sorted tasks."""

    tasks: list[Task]
    total: int
    total_pages: int
    current_page: int

    def to_api(self) -> dict[str, Any]:
        return {
            "count": len(self.tasks),
            "total": self.total,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "tasks": [task.to_api() for task in self.tasks],
        }


def _is_active(value: str | None) -> bool:
    return bool(value) and value != ALL


def matches_filters(task: Task, query: TaskQuery) -> bool:
    """Return True if the task passes every active filter in the query."""
    if _is_active(query.status) and task.status != query.status:
        return False
    if _is_active(query.priority) and task.priority != query.priority:
        return False
    if query.search:
        needle = query.search.lower()
        if needle not in task.title.lower() and needle not in task.description.lower():
            return False
    return True


def resolve_sort_field(sort_by: str) -> str:
    """Map an API sort name (or attribute name) to a Task attribute.

    Unknown names fall back to the default sort field.
    """
    if sort_by in SORTABLE_FIELDS:
        return SORTABLE_FIELDS[sort_by]
    if sort_by in SORTABLE_FIELDS.values():
        return sort_by
    logger.warning("Invalid sort parameter, using default", extra={"sort_by": sort_by})
    return SORTABLE_FIELDS[constants.DEFAULT_SORT_FIELD]


def priority_rank(value: Any) -> int:
    """Rank a priority value; unrecognised values rank 0."""
    return constants.PRIORITY_RANK.get(value, 0)


def _less_than(a: Any, b: Any) -> bool:
    """Ordering used by the comparator. Missing values sort below present ones."""
    if a is None or b is None:
        return a is None and b is not None
    if type(a) is not type(b):
        return str(a) < str(b)
    return a < b


def make_comparator(field: str, order: str) -> Callable[[Task, Task], int]:
    """Build the two-way comparator for ``sorted``.

    It never returns 0: equal keys compare as +1 in either direction, which is
    what leaves the relative order of ties unspecified. Only ``desc`` sorts
    descending; any other order value sorts ascending.
    """
    descending = order == "desc"

    def key_of(task: Task) -> Any:
        value = getattr(task, field)
        return priority_rank(value) if field == "priority" else value

    def compare(a: Task, b: Task) -> int:
        a_key, b_key = key_of(a), key_of(b)
        if descending:
            return -1 if _less_than(b_key, a_key) else 1
        return -1 if _less_than(a_key, b_key) else 1

    return compare


def sort_tasks(tasks: list[Task], sort_by: str, order: str) -> list[Task]:
    field = resolve_sort_field(sort_by)
    return sorted(tasks, key=cmp_to_key(make_comparator(field, order)))


def paginate(tasks: list[Task], page: int, limit: int) -> TaskPage:
    total = len(tasks)
    start_index = (page - 1) * limit
    return TaskPage(
        tasks=tasks[start_index : start_index + limit],
        total=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
    )


def apply_query(tasks: list[Task], query: TaskQuery) -> TaskPage:
    """Filter, sort and paginate an already-fetched snapshot."""
    filtered = [task for task in tasks if matches_filters(task, query)]
    ordered = sort_tasks(filtered, query.sort_by, query.order)
    return paginate(ordered, query.page, query.limit)


async def list_tasks(*, task_store: TaskStore, owner_id: str, query: TaskQuery) -> TaskPage | ServiceError:
    """List one page of an owner's tasks.

    Args:
        task_store: Store to read the owner's snapshot from
        owner_id: Authenticated account ID
        query: Filter, sort and page parameters

    Returns:
        TaskPage on success, or an UPSTREAM ServiceError if the store fails
    """
    with span("query_engine.list_tasks"):
        try:
            tasks = await task_store.find_by_owner(owner_id)
        except (DatabaseError, ValidationError) as e:
            logger.error("list_tasks_failed", extra={"account_id": owner_id, "error": str(e)})
            return upstream()

        result = apply_query(tasks, query)
        logger.info(
            "Listed tasks",
            extra={"account_id": owner_id, "total": result.total, "page": result.current_page},
        )
        return result
