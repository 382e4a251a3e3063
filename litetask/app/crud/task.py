"""
Task CRUD operations.
Every write re-reads the task with its author so callers get stored state.
"""
from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidStatusException, NotFoundException, ProjectNotFoundException
from app.crud.base import CRUDBase
from app.models.comment import TaskComment
from app.models.project import Project
from app.models.task import Task, TaskStatus


def parse_status(value: str | TaskStatus) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise InvalidStatusException(value)


class CRUDTask(CRUDBase[Task]):

    def _hydrated(self):
        return (
            select(Task)
            .options(selectinload(Task.author))
            .execution_options(populate_existing=True)
        )

    async def get_hydrated(self, db: AsyncSession, task_id: int) -> Task | None:
        """Fetch a task with its author eagerly loaded."""
        result = await db.execute(self._hydrated().where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def get_hydrated_or_404(self, db: AsyncSession, task_id: int) -> Task:
        task = await self.get_hydrated(db, task_id)
        if task is None:
            raise NotFoundException("Task", task_id)
        return task

    async def project_id_of(self, db: AsyncSession, task_id: int) -> int | None:
        result = await db.execute(select(Task.project_id).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def create_task(
        self,
        db: AsyncSession,
        *,
        title: str,
        description: str,
        project_id: int,
        created_by: int | None,
    ) -> Task:
        """Insert a task in status ``new``; the project must exist."""
        if await db.get(Project, project_id) is None:
            raise ProjectNotFoundException(project_id)

        task = Task(
            title=title,
            description=description,
            status=TaskStatus.NEW,
            project_id=project_id,
            created_by=created_by,
        )
        db.add(task)
        await db.flush()
        return await self.get_hydrated_or_404(db, task.id)

    async def set_status(
        self, db: AsyncSession, *, task_id: int, status: str | TaskStatus
    ) -> Task:
        """Any status may follow any other; only the value set is checked."""
        new_status = parse_status(status)
        task = await self.get(db, task_id)
        if task is None:
            raise NotFoundException("Task", task_id)
        task.status = new_status
        await db.flush()
        return await self.get_hydrated_or_404(db, task_id)

    async def set_description(
        self, db: AsyncSession, *, task_id: int, description: str
    ) -> Task:
        task = await self.get(db, task_id)
        if task is None:
            raise NotFoundException("Task", task_id)
        task.description = description
        await db.flush()
        return await self.get_hydrated_or_404(db, task_id)

    async def delete_task(self, db: AsyncSession, *, task_id: int) -> None:
        task = await self.get(db, task_id)
        if task is None:
            raise NotFoundException("Task", task_id)
        await db.execute(delete(TaskComment).where(TaskComment.task_id == task_id))
        await db.delete(task)
        await db.flush()

    async def list_tasks(
        self,
        db: AsyncSession,
        *,
        project_id: int | None = None,
        status: str | TaskStatus | None = None,
        allowed_project_ids: Collection[int] | None = None,
    ) -> list[Task]:
        """
        Tasks newest-first with their authors.

        ``allowed_project_ids`` of None means no restriction; an empty
        collection matches nothing.
        """
        query = self._hydrated()
        if project_id is not None:
            query = query.where(Task.project_id == project_id)
        if allowed_project_ids is not None:
            if not allowed_project_ids:
                return []
            query = query.where(Task.project_id.in_(list(allowed_project_ids)))
        if status is not None:
            query = query.where(Task.status == parse_status(status))

        result = await db.execute(query.order_by(Task.created_at.desc(), Task.id.desc()))
        return list(result.scalars().all())


crud_task = CRUDTask(Task)
