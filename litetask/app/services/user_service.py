"""
User management service.
Admin operations on accounts and self-service profile updates.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.crud.grant import crud_grant
from app.crud.user import crud_user
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserAdminUpdate, UserCreate

logger = logging.getLogger(__name__)


class UserService:

    async def list_users(self, db: AsyncSession) -> list[tuple[User, list[int]]]:
        """All users newest-first with their granted project ids."""
        users = await crud_user.list_users(db)
        grants = await crud_grant.get_project_ids_map(db, user_ids=[u.id for u in users])
        return [(user, grants[user.id]) for user in users]

    async def get_user(self, db: AsyncSession, *, user_id: int) -> tuple[User, list[int]]:
        user = await crud_user.get_or_404(db, user_id)
        return user, await crud_grant.get_project_ids(db, user_id=user.id)

    async def create_user(
        self, db: AsyncSession, *, user_in: UserCreate
    ) -> tuple[User, list[int]]:
        user = await crud_user.create_user(
            db,
            email=user_in.email,
            password=user_in.password,
            role=user_in.role,
            username=user_in.username,
            first_name=user_in.first_name,
            last_name=user_in.last_name,
        )
        logger.info("Admin created user id=%s role=%s", user.id, user.role.value)
        return await self.get_user(db, user_id=user.id)

    async def update_user(
        self, db: AsyncSession, *, user_id: int, user_in: UserAdminUpdate
    ) -> tuple[User, list[int]]:
        """
        Apply an admin update. All parts run in the request transaction,
        so a failing part leaves the account unchanged.
        """
        changes = user_in.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise BadRequestException("Nothing to update")

        await crud_user.get_or_404(db, user_id)
        if user_in.role is not None:
            await crud_user.update_role(db, user_id=user_id, role=user_in.role.strip())
        if user_in.password is not None:
            await crud_user.set_password(db, user_id=user_id, password=user_in.password)
        if user_in.project_ids is not None:
            await crud_grant.set_projects(db, user_id=user_id, project_ids=user_in.project_ids)
        if user_in.first_name is not None or user_in.last_name is not None:
            await crud_user.update_profile(
                db,
                user_id=user_id,
                first_name=user_in.first_name,
                last_name=user_in.last_name,
            )
        return await self.get_user(db, user_id=user_id)

    async def update_profile(
        self, db: AsyncSession, *, user: User, profile_in: ProfileUpdate
    ) -> tuple[User, list[int]]:
        """Self-service update; the username can only be set once."""
        if profile_in.password is not None:
            await crud_user.set_password(db, user_id=user.id, password=profile_in.password)
        await crud_user.update_profile(
            db,
            user_id=user.id,
            telegram=profile_in.telegram,
            first_name=profile_in.first_name,
            last_name=profile_in.last_name,
        )
        if profile_in.username is not None and profile_in.username.strip():
            if profile_in.username.strip().lower() != (user.username or ""):
                await crud_user.set_username_once(
                    db, user_id=user.id, username=profile_in.username
                )
        return await self.get_user(db, user_id=user.id)


user_service = UserService()
