"""
User administration routes (admin only).
GET/POST /users, PATCH /users/{user_id}
"""
from __future__ import annotations

from fastapi import APIRouter, status

from app.core.dependencies import AdminUser, DBSession
from app.schemas.user import UserAdminUpdate, UserCreate, UserRead
from app.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserRead], summary="List all users")
async def list_users(_admin: AdminUser, db: DBSession) -> list[UserRead]:
    users = await user_service.list_users(db)
    return [UserRead.from_user(user, project_ids) for user, project_ids in users]


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    user_in: UserCreate,
    _admin: AdminUser,
    db: DBSession,
) -> UserRead:
    user, project_ids = await user_service.create_user(db, user_in=user_in)
    return UserRead.from_user(user, project_ids)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Change role, password, project grants or names",
)
async def update_user(
    user_id: int,
    user_in: UserAdminUpdate,
    _admin: AdminUser,
    db: DBSession,
) -> UserRead:
    user, project_ids = await user_service.update_user(db, user_id=user_id, user_in=user_in)
    return UserRead.from_user(user, project_ids)
