"""
Authentication service.
Handles registration, login, token issuance and session resolution.
Business logic lives here; routes only call these methods.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ForbiddenException,
    InactiveUserException,
    MissingTokenException,
    UnauthorizedException,
)
from app.core.security import create_session_token, decode_session_token, verify_password
from app.crud.user import crud_user
from app.models.user import User, UserRole
from app.schemas.user import UserRegister

logger = logging.getLogger(__name__)


class AuthService:

    async def register_user(
        self, db: AsyncSession, *, user_in: UserRegister
    ) -> User:
        """Create a regular account with access to the default project."""
        user = await crud_user.create_user(
            db,
            email=user_in.email,
            password=user_in.password,
            role=UserRole.USER,
            username=user_in.username,
            first_name=user_in.first_name,
            last_name=user_in.last_name,
        )
        logger.info("Registered user id=%s", user.id)
        return user

    async def authenticate_user(
        self, db: AsyncSession, *, login: str, password: str
    ) -> User:
        """
        Verify credentials given by email or username.
        Blocked accounts are refused even with the right password.
        """
        user = await crud_user.get_by_login(db, login)
        if user is None or not verify_password(password, user.hashed_password):
            raise UnauthorizedException("Invalid login or password", error_code="INVALID_CREDENTIALS")
        if user.is_blocked:
            raise ForbiddenException("User account is blocked")
        return user

    def issue_token(self, user: User) -> str:
        return create_session_token(user.id, user.role.value)

    async def resolve_session(self, db: AsyncSession, *, token: str | None) -> User:
        """
        Turn a session token into the live user record.

        The role in the token is informational; the stored role decides,
        so blocking a user takes effect on their next request.
        """
        if not token:
            raise MissingTokenException()
        claims = decode_session_token(token)
        user = await crud_user.get(db, claims.user_id)
        if user is None:
            raise InactiveUserException("User not found")
        if user.is_blocked:
            raise InactiveUserException("User account is blocked")
        return user


auth_service = AuthService()
