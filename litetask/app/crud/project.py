"""
Project CRUD operations.
"""
from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ConflictException, NotFoundException
from app.crud.base import CRUDBase
from app.models.comment import TaskComment
from app.models.project import DEFAULT_PROJECT_ID, Project
from app.models.task import Task


class CRUDProject(CRUDBase[Project]):

    async def list_projects(
        self, db: AsyncSession, *, allowed_ids: frozenset[int] | None = None
    ) -> list[Project]:
        """All projects newest-first, optionally limited to ``allowed_ids``."""
        query = select(Project).order_by(Project.created_at.desc(), Project.id.desc())
        if allowed_ids is not None:
            if not allowed_ids:
                return []
            query = query.where(Project.id.in_(allowed_ids))
        result = await db.execute(query)
        return list(result.scalars().all())

    async def create_project(self, db: AsyncSession, *, name: str) -> Project:
        """Insert a project; names are unique by exact match."""
        name = name.strip()
        if not name:
            raise BadRequestException("Project name is required")
        if await self.exists(db, name=name):
            raise ConflictException(f"Project '{name}' already exists")

        project = Project(name=name)
        db.add(project)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent insert took the name after the check above.
            raise ConflictException(f"Project '{name}' already exists")
        await db.refresh(project)
        return project

    async def delete_project(self, db: AsyncSession, *, project_id: int) -> None:
        """
        Delete a project with its tasks and their comments.

        All statements run in the caller's transaction; an error on any
        step rolls the whole deletion back.
        """
        if not await self.exists(db, id=project_id):
            raise NotFoundException("Project", project_id)

        task_ids = select(Task.id).where(Task.project_id == project_id)
        await db.execute(delete(TaskComment).where(TaskComment.task_id.in_(task_ids)))
        await db.execute(delete(Task).where(Task.project_id == project_id))
        await db.execute(delete(Project).where(Project.id == project_id))
        await db.flush()

    async def name_map(self, db: AsyncSession) -> dict[int, str]:
        result = await db.execute(select(Project.id, Project.name))
        return {pid: name for pid, name in result.all()}

    async def ensure_default(self, db: AsyncSession, *, name: str) -> Project:
        """Insert the default project if missing and reassert its name."""
        project = await self.get(db, DEFAULT_PROJECT_ID)
        if project is None:
            project = Project(id=DEFAULT_PROJECT_ID, name=name)
            db.add(project)
        elif project.name != name:
            project.name = name
        await db.flush()
        await db.refresh(project)
        return project


crud_project = CRUDProject(Project)
