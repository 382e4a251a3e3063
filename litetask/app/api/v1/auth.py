"""
Authentication routes.
POST /auth/register, /auth/login, /auth/logout and GET /auth/me.
The session token travels in an HTTP-only cookie.
"""
from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from app.core.config import settings
from app.core.dependencies import CurrentUser, DBSession
from app.core.exceptions import ForbiddenException
from app.core.rate_limit import limiter
from app.crud.grant import crud_grant
from app.models.user import User
from app.schemas.user import LoginRequest, UserRead, UserRegister
from app.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_auth_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=auth_service.issue_token(user),
        max_age=settings.auth_token_expire_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.AUTH_COOKIE_SECURE,
    )


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account and start a session",
)
async def register(
    user_in: UserRegister,
    response: Response,
    db: DBSession,
) -> UserRead:
    if not settings.ALLOW_REGISTRATION:
        raise ForbiddenException("Registration is disabled")
    user = await auth_service.register_user(db, user_in=user_in)
    set_auth_cookie(response, user)
    project_ids = await crud_grant.get_project_ids(db, user_id=user.id)
    return UserRead.from_user(user, project_ids)


@router.post(
    "/login",
    response_model=UserRead,
    summary="Authenticate by email or username",
)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: DBSession,
) -> UserRead:
    user = await auth_service.authenticate_user(
        db, login=credentials.login, password=credentials.password
    )
    set_auth_cookie(response, user)
    project_ids = await crud_grant.get_project_ids(db, user_id=user.id)
    return UserRead.from_user(user, project_ids)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear the session cookie",
)
async def logout() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.AUTH_COOKIE_SECURE,
    )
    return response


@router.get("/me", response_model=UserRead, summary="Get the current user")
async def me(current_user: CurrentUser, db: DBSession) -> UserRead:
    project_ids = await crud_grant.get_project_ids(db, user_id=current_user.id)
    return UserRead.from_user(current_user, project_ids)
