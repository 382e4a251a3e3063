"""
FastAPI dependency injection functions.
Provides get_db, get_current_user, get_access_scope and require_admin.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Cookie, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.session import get_db
from app.models.user import User
from app.services.access_service import AccessScope, access_service
from app.services.auth_service import auth_service

# Re-export get_db so routes can import from one place
__all__ = [
    "get_db",
    "get_current_user",
    "get_access_scope",
    "require_admin",
    "DBSession",
    "CurrentUser",
    "CurrentScope",
    "AdminUser",
]


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    token: Annotated[str | None, Cookie(alias=settings.AUTH_COOKIE_NAME)] = None,
) -> User:
    """
    Validate the session cookie and return the live User record.
    """
    return await auth_service.resolve_session(db, token=token)


async def get_access_scope(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> AccessScope:
    """Project scope of the current user, computed once per request."""
    return await access_service.build_scope(db, user=current_user)


async def require_admin(
    scope: Annotated[AccessScope, Depends(get_access_scope)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that requires the current user to have the 'admin' role."""
    scope.require_admin()
    return current_user


# Convenience type aliases for route signatures
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentScope = Annotated[AccessScope, Depends(get_access_scope)]
AdminUser = Annotated[User, Depends(require_admin)]
