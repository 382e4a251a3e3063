"""
Task business logic service.
Every operation is gated by the caller's AccessScope before touching data.
"""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, NotFoundException
from app.crud.comment import crud_comment
from app.crud.task import crud_task
from app.models.comment import TaskComment
from app.models.task import Task, TaskStatus
from app.services.access_service import AccessScope, access_service


class TaskService:

    async def list_tasks(
        self,
        db: AsyncSession,
        *,
        scope: AccessScope,
        project_id: int | None = None,
        status: str | TaskStatus | None = None,
    ) -> list[Task]:
        """
        List tasks visible to the caller.
        Without project_id a restricted caller gets tasks of all granted projects.
        """
        if project_id is not None:
            scope.require_project(project_id)
        return await crud_task.list_tasks(
            db,
            project_id=project_id,
            status=status,
            allowed_project_ids=scope.project_ids,
        )

    async def get_task(
        self, db: AsyncSession, *, task_id: int, scope: AccessScope
    ) -> Task:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        return await crud_task.get_hydrated_or_404(db, task_id)

    async def create_task(
        self,
        db: AsyncSession,
        *,
        title: str,
        description: str,
        project_id: int,
        scope: AccessScope,
    ) -> Task:
        scope.require_project(project_id)
        return await crud_task.create_task(
            db,
            title=title,
            description=description,
            project_id=project_id,
            created_by=scope.user_id,
        )

    async def set_status(
        self,
        db: AsyncSession,
        *,
        task_id: int,
        status: str | TaskStatus,
        scope: AccessScope,
    ) -> Task:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        return await crud_task.set_status(db, task_id=task_id, status=status)

    async def set_description(
        self,
        db: AsyncSession,
        *,
        task_id: int,
        description: str,
        scope: AccessScope,
    ) -> Task:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        return await crud_task.set_description(db, task_id=task_id, description=description)

    async def delete_task(
        self, db: AsyncSession, *, task_id: int, scope: AccessScope
    ) -> None:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        await crud_task.delete_task(db, task_id=task_id)

    # ── Comments ──────────────────────────────────────────────────────────────

    async def comments_for(
        self, db: AsyncSession, *, tasks: list[Task]
    ) -> dict[int, list[TaskComment]]:
        """Comments of all given tasks, fetched with a single query."""
        return await crud_comment.list_by_task_ids(db, task_ids=[t.id for t in tasks])

    async def list_comments(
        self, db: AsyncSession, *, task_id: int, scope: AccessScope
    ) -> list[TaskComment]:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        return await crud_comment.list_by_task(db, task_id=task_id)

    async def add_comment(
        self,
        db: AsyncSession,
        *,
        task_id: int,
        body: str,
        scope: AccessScope,
    ) -> TaskComment:
        await access_service.require_task(db, scope=scope, task_id=task_id)
        return await crud_comment.create_comment(
            db, task_id=task_id, body=body, author_id=scope.user_id
        )

    async def delete_comment(
        self,
        db: AsyncSession,
        *,
        task_id: int,
        comment_id: int,
        scope: AccessScope,
    ) -> None:
        """Only the comment's author or an admin may delete it."""
        await access_service.require_task(db, scope=scope, task_id=task_id)
        comment = await crud_comment.get(db, comment_id)
        if comment is None or comment.task_id != task_id:
            raise NotFoundException("Comment", comment_id)
        if not scope.is_admin and comment.author_id != scope.user_id:
            raise ForbiddenException("Only the author or an admin can delete this comment")
        await crud_comment.delete_comment(db, comment=comment)


task_service = TaskService()
