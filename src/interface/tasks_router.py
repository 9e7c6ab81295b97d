"""Task routes. Every route here requires a bearer assertion."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from src.core.config import constants
from src.core.errors import ServiceError
from src.core.stores import TaskStore
from src.interface.dependencies import get_task_store, require_account
from src.interface.responses import error_response, success_response
from src.services import query_engine, stats_service, task_service
from src.services.query_engine import TaskQuery


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
    status_filter: str | None = Query(default=None, alias="status"),
    priority: str | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: str = Query(default=constants.DEFAULT_SORT_FIELD, alias="sortBy"),
    order: str = Query(default=constants.DEFAULT_SORT_ORDER),
    page: int = Query(default=constants.DEFAULT_PAGE, ge=1),
    limit: int = Query(default=constants.DEFAULT_PAGE_LIMIT, ge=1),
) -> JSONResponse:
    """List the caller's tasks with filtering, sorting and pagination."""
    query = TaskQuery(
        status=status_filter,
        priority=priority,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    result = await query_engine.list_tasks(task_store=task_store, owner_id=account_id, query=query)
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response(result.to_api())


@router.post("")
async def create_task(
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
    payload: dict[str, Any] | None = Body(default=None),
) -> JSONResponse:
    """Create a task owned by the caller."""
    result = await task_service.create_task(task_store=task_store, owner_id=account_id, payload=payload or {})
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"task": result.to_api()}, status_code=status.HTTP_201_CREATED)


@router.get("/stats")
async def get_task_stats(
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    """Counts of the caller's tasks by status and priority."""
    result = await stats_service.get_stats(task_store=task_store, owner_id=account_id)
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response(result.to_api())


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    """Fetch one of the caller's tasks."""
    result = await task_service.get_task(task_store=task_store, owner_id=account_id, task_id=task_id)
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"task": result.to_api()})


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
    payload: dict[str, Any] | None = Body(default=None),
) -> JSONResponse:
    """Partially update one of the caller's tasks."""
    result = await task_service.update_task(
        task_store=task_store, owner_id=account_id, task_id=task_id, payload=payload or {}
    )
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"task": result.to_api()})


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    *,
    account_id: str = Depends(require_account),
    task_store: TaskStore = Depends(get_task_store),
) -> JSONResponse:
    """Delete one of the caller's tasks."""
    result = await task_service.delete_task(task_store=task_store, owner_id=account_id, task_id=task_id)
    if isinstance(result, ServiceError):
        return error_response(result)
    return success_response({"message": "Task deleted successfully"})
