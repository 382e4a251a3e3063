"""
Task routes.
Listing, creation, description and status updates, deletion.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from app.core.dependencies import CurrentScope, DBSession
from app.schemas.task import (
    TaskCreate,
    TaskDescriptionUpdate,
    TaskRead,
    TaskReadWithComments,
    TaskStatusUpdate,
)
from app.services.task_service import task_service

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get(
    "",
    response_model=list[TaskReadWithComments],
    summary="List tasks newest-first with their comments",
)
async def list_tasks(
    scope: CurrentScope,
    db: DBSession,
    project_id: Annotated[int | None, Query(alias="projectId")] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[TaskReadWithComments]:
    tasks = await task_service.list_tasks(
        db,
        scope=scope,
        project_id=project_id or None,
        status=status_filter.strip() if status_filter and status_filter.strip() else None,
    )
    comments = await task_service.comments_for(db, tasks=tasks)
    return [TaskReadWithComments.from_task(t, comments[t.id]) for t in tasks]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    task_in: TaskCreate,
    scope: CurrentScope,
    db: DBSession,
) -> TaskRead:
    task = await task_service.create_task(
        db,
        title=task_in.title,
        description=task_in.description,
        project_id=task_in.project_id,
        scope=scope,
    )
    return TaskRead.model_validate(task)


@router.get(
    "/{task_id}",
    response_model=TaskReadWithComments,
    summary="Get a task with its comments",
)
async def get_task(task_id: int, scope: CurrentScope, db: DBSession) -> TaskReadWithComments:
    task = await task_service.get_task(db, task_id=task_id, scope=scope)
    comments = await task_service.comments_for(db, tasks=[task])
    return TaskReadWithComments.from_task(task, comments[task.id])


@router.patch(
    "/{task_id}",
    response_model=TaskRead,
    summary="Replace a task's description",
)
async def update_description(
    task_id: int,
    body: TaskDescriptionUpdate,
    scope: CurrentScope,
    db: DBSession,
) -> TaskRead:
    task = await task_service.set_description(
        db, task_id=task_id, description=body.description, scope=scope
    )
    return TaskRead.model_validate(task)


@router.patch(
    "/{task_id}/status",
    response_model=TaskRead,
    summary="Move a task to another status",
)
async def update_status(
    task_id: int,
    body: TaskStatusUpdate,
    scope: CurrentScope,
    db: DBSession,
) -> TaskRead:
    task = await task_service.set_status(db, task_id=task_id, status=body.status, scope=scope)
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task and its comments",
)
async def delete_task(task_id: int, scope: CurrentScope, db: DBSession) -> Response:
    await task_service.delete_task(db, task_id=task_id, scope=scope)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
