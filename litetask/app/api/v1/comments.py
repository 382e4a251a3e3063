"""
Comment routes nested under tasks.
/tasks/{task_id}/comments
"""
from __future__ import annotations

from fastapi import APIRouter, Response, status

from app.core.dependencies import CurrentScope, DBSession
from app.schemas.comment import CommentCreate, CommentRead
from app.services.task_service import task_service

router = APIRouter(tags=["Comments"])


@router.get(
    "/tasks/{task_id}/comments",
    response_model=list[CommentRead],
    summary="List comments on a task, oldest first",
)
async def list_comments(task_id: int, scope: CurrentScope, db: DBSession) -> list[CommentRead]:
    comments = await task_service.list_comments(db, task_id=task_id, scope=scope)
    return [CommentRead.model_validate(c) for c in comments]


@router.post(
    "/tasks/{task_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment to a task",
)
async def create_comment(
    task_id: int,
    comment_in: CommentCreate,
    scope: CurrentScope,
    db: DBSession,
) -> CommentRead:
    comment = await task_service.add_comment(
        db, task_id=task_id, body=comment_in.body, scope=scope
    )
    return CommentRead.model_validate(comment)


@router.delete(
    "/tasks/{task_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment (author or admin)",
)
async def delete_comment(
    task_id: int,
    comment_id: int,
    scope: CurrentScope,
    db: DBSession,
) -> Response:
    await task_service.delete_comment(
        db, task_id=task_id, comment_id=comment_id, scope=scope
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
