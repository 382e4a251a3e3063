"""
Access control.

An AccessScope is computed once per authenticated request and passed to
every project and task operation. Admins and the service identity are
unrestricted; other users are limited to the projects granted to them.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, InactiveUserException, NotFoundException
from app.crud.grant import crud_grant
from app.crud.task import crud_task
from app.models.user import User, UserRole


@dataclass(frozen=True)
class AccessScope:
    user_id: int | None
    role: UserRole | None
    # None means unrestricted.
    project_ids: frozenset[int] | None

    @classmethod
    def for_admin(cls, user_id: int) -> AccessScope:
        return cls(user_id=user_id, role=UserRole.ADMIN, project_ids=None)

    @classmethod
    def service(cls) -> AccessScope:
        """Scope of trusted front-ends that act without a user account."""
        return cls(user_id=None, role=None, project_ids=None)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def unrestricted(self) -> bool:
        return self.project_ids is None

    def can_access(self, project_id: int) -> bool:
        return self.project_ids is None or project_id in self.project_ids

    def require_project(self, project_id: int) -> None:
        if not self.can_access(project_id):
            raise ForbiddenException("No access to this project")

    def require_admin(self) -> None:
        if not self.is_admin:
            raise ForbiddenException("Admin privileges required")


class AccessService:

    async def build_scope(self, db: AsyncSession, *, user: User) -> AccessScope:
        if user.role == UserRole.ADMIN:
            return AccessScope.for_admin(user.id)
        if user.role == UserRole.BLOCKED:
            raise InactiveUserException("User account is blocked")
        project_ids = await crud_grant.get_project_ids(db, user_id=user.id)
        return AccessScope(
            user_id=user.id,
            role=user.role,
            project_ids=frozenset(project_ids),
        )

    async def require_task(
        self, db: AsyncSession, *, scope: AccessScope, task_id: int
    ) -> int:
        """
        Check access to a task and return its project id.

        Scope is checked before existence: a restricted caller gets
        Forbidden for a task id that does not exist.
        """
        project_id = await crud_task.project_id_of(db, task_id)
        if not scope.unrestricted:
            if project_id is None or not scope.can_access(project_id):
                raise ForbiddenException("No access to this task")
        if project_id is None:
            raise NotFoundException("Task", task_id)
        return project_id


access_service = AccessService()
