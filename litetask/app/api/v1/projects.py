"""
Project routes, filtered by the caller's project scope.
GET/POST /projects, DELETE /projects/{project_id}
"""
from __future__ import annotations

from fastapi import APIRouter, Response, status

from app.core.dependencies import CurrentScope, DBSession
from app.schemas.project import ProjectCreate, ProjectRead
from app.services.project_service import project_service

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=list[ProjectRead], summary="List visible projects")
async def list_projects(scope: CurrentScope, db: DBSession) -> list[ProjectRead]:
    projects = await project_service.list_projects(db, scope=scope)
    return [ProjectRead.model_validate(p) for p in projects]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    project_in: ProjectCreate,
    scope: CurrentScope,
    db: DBSession,
) -> ProjectRead:
    project = await project_service.create_project(db, name=project_in.name, scope=scope)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project with its tasks (admin only)",
)
async def delete_project(project_id: int, scope: CurrentScope, db: DBSession) -> Response:
    await project_service.delete_project(db, project_id=project_id, scope=scope)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
