"""
Self-service profile route.
PATCH /profile
"""
from __future__ import annotations

from fastapi import APIRouter

from app.core.dependencies import CurrentUser, DBSession
from app.schemas.user import ProfileUpdate, UserRead
from app.services.user_service import user_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.patch("", response_model=UserRead, summary="Update own profile")
async def update_profile(
    profile_in: ProfileUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> UserRead:
    user, project_ids = await user_service.update_profile(
        db, user=current_user, profile_in=profile_in
    )
    return UserRead.from_user(user, project_ids)
