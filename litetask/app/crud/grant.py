"""
User-project grant CRUD operations.
Grants decide which projects a non-admin user may see and act on.
"""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ProjectNotFoundException
from app.models.project import Project
from app.models.user_project import UserProject


class CRUDGrant:

    async def get_project_ids(self, db: AsyncSession, *, user_id: int) -> list[int]:
        result = await db.execute(
            select(UserProject.project_id)
            .where(UserProject.user_id == user_id)
            .order_by(UserProject.project_id)
        )
        return list(result.scalars().all())

    async def get_project_ids_map(
        self, db: AsyncSession, *, user_ids: Iterable[int]
    ) -> dict[int, list[int]]:
        """Grants for many users in one query; users without grants map to []."""
        ids = list(dict.fromkeys(user_ids))
        grants: dict[int, list[int]] = {uid: [] for uid in ids}
        if not ids:
            return grants
        result = await db.execute(
            select(UserProject.user_id, UserProject.project_id)
            .where(UserProject.user_id.in_(ids))
            .order_by(UserProject.user_id, UserProject.project_id)
        )
        for user_id, project_id in result.all():
            grants[user_id].append(project_id)
        return grants

    async def add_project(
        self, db: AsyncSession, *, user_id: int, project_id: int
    ) -> None:
        """Grant one project; a no-op when the grant already exists."""
        existing = await db.get(UserProject, (user_id, project_id))
        if existing is not None:
            return
        db.add(UserProject(user_id=user_id, project_id=project_id))
        await db.flush()

    async def set_projects(
        self, db: AsyncSession, *, user_id: int, project_ids: Iterable[int]
    ) -> list[int]:
        """
        Replace the user's entire grant set.

        Every id is checked first; an unknown project aborts before anything
        is removed. The delete and re-insert share the caller's transaction.
        """
        wanted = sorted(set(project_ids))
        if wanted:
            result = await db.execute(select(Project.id).where(Project.id.in_(wanted)))
            found = set(result.scalars().all())
            missing = [pid for pid in wanted if pid not in found]
            if missing:
                raise ProjectNotFoundException(missing[0])

        await db.execute(delete(UserProject).where(UserProject.user_id == user_id))
        db.add_all(UserProject(user_id=user_id, project_id=pid) for pid in wanted)
        await db.flush()
        return wanted


crud_grant = CRUDGrant()
