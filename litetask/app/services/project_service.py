"""
Project business logic service.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.crud.grant import crud_grant
from app.crud.project import crud_project
from app.models.project import DEFAULT_PROJECT_ID, Project
from app.services.access_service import AccessScope

logger = logging.getLogger(__name__)


class ProjectService:

    async def list_projects(
        self, db: AsyncSession, *, scope: AccessScope
    ) -> list[Project]:
        return await crud_project.list_projects(db, allowed_ids=scope.project_ids)

    async def create_project(
        self, db: AsyncSession, *, name: str, scope: AccessScope
    ) -> Project:
        """Create a project; a restricted creator is granted access to it."""
        project = await crud_project.create_project(db, name=name)
        if not scope.unrestricted and scope.user_id is not None:
            await crud_grant.add_project(db, user_id=scope.user_id, project_id=project.id)
        logger.info("Project id=%s created by user=%s", project.id, scope.user_id)
        return project

    async def delete_project(
        self, db: AsyncSession, *, project_id: int, scope: AccessScope
    ) -> None:
        scope.require_admin()
        if project_id == DEFAULT_PROJECT_ID:
            raise BadRequestException("The default project cannot be deleted")
        await crud_project.delete_project(db, project_id=project_id)
        logger.info("Project id=%s deleted by user=%s", project_id, scope.user_id)

    async def project_name(self, db: AsyncSession, *, project_id: int) -> str:
        project = await crud_project.get(db, project_id)
        if project is not None:
            return project.name
        return f"Проект {project_id}"


project_service = ProjectService()
