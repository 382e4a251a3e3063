"""
User CRUD operations.
Covers account creation, lookups, role changes and the set-once username.
"""
from __future__ import annotations

import string

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictException,
    InvalidRoleException,
    InvalidUsernameException,
    LastAdminException,
    NotFoundException,
    UsernameAlreadySetException,
)
from app.core.security import hash_password, validate_password_strength
from app.crud.base import CRUDBase
from app.crud.grant import crud_grant
from app.models.project import DEFAULT_PROJECT_ID
from app.models.user import User, UserRole

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
_USERNAME_CHARS = frozenset(string.ascii_lowercase + string.digits + "_-.")


def normalize_username(username: str) -> str:
    return username.strip().lower()


def validate_username(username: str) -> str:
    """Normalize and check a username; raises InvalidUsernameException."""
    username = normalize_username(username)
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise InvalidUsernameException(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if "@" in username:
        raise InvalidUsernameException("Username cannot contain @")
    if not set(username) <= _USERNAME_CHARS:
        raise InvalidUsernameException("Username has invalid characters")
    return username


def parse_role(value: str | UserRole) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise InvalidRoleException(value)


class CRUDUser(CRUDBase[User]):

    async def get_or_404(self, db: AsyncSession, user_id: int) -> User:
        user = await self.get(db, user_id)
        if user is None:
            raise NotFoundException("User", user_id)
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_login(self, db: AsyncSession, login: str) -> User | None:
        """Look a user up by email or username."""
        login = login.strip().lower()
        if not login:
            return None
        result = await db.execute(
            select(User)
            .where(or_(User.email == login, User.username == login))
            .order_by(User.id)
            .limit(1)
        )
        return result.scalars().first()

    async def get_first_admin(self, db: AsyncSession) -> User | None:
        result = await db.execute(
            select(User).where(User.role == UserRole.ADMIN).order_by(User.id).limit(1)
        )
        return result.scalars().first()

    async def count_admins(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count()).select_from(User).where(User.role == UserRole.ADMIN)
        )
        return result.scalar_one()

    async def create_user(
        self,
        db: AsyncSession,
        *,
        email: str,
        password: str,
        role: str | UserRole = UserRole.USER,
        username: str | None = None,
        first_name: str = "",
        last_name: str = "",
    ) -> User:
        """
        Create an account and grant it the default project.

        The password is checked against the policy and hashed here; email
        and username must be unused.
        """
        email = email.strip().lower()
        role = parse_role(role)
        password = validate_password_strength(password)
        clean_username = None
        if username is not None and username.strip():
            clean_username = validate_username(username)

        if await self.exists(db, email=email):
            raise ConflictException("A user with this email already exists")
        if clean_username and await self.exists(db, username=clean_username):
            raise ConflictException("A user with this username already exists")

        user = User(
            email=email,
            username=clean_username,
            hashed_password=hash_password(password),
            role=role,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            telegram="",
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictException("A user with this email or username already exists")
        await db.refresh(user)

        await crud_grant.add_project(db, user_id=user.id, project_id=DEFAULT_PROJECT_ID)
        return user

    async def list_users(self, db: AsyncSession) -> list[User]:
        result = await db.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def update_role(
        self, db: AsyncSession, *, user_id: int, role: str | UserRole
    ) -> User:
        """Change a role; the last remaining admin cannot be demoted."""
        new_role = parse_role(role)
        user = await self.get_or_404(db, user_id)

        if user.role == UserRole.ADMIN and new_role != UserRole.ADMIN:
            if await self.count_admins(db) <= 1:
                raise LastAdminException()

        return await self.update(db, db_obj=user, obj_in={"role": new_role})

    async def set_password(
        self, db: AsyncSession, *, user_id: int, password: str
    ) -> User:
        password = validate_password_strength(password)
        user = await self.get_or_404(db, user_id)
        return await self.update(
            db, db_obj=user, obj_in={"hashed_password": hash_password(password)}
        )

    async def update_profile(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        telegram: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Update the given profile fields; None leaves a field unchanged."""
        user = await self.get_or_404(db, user_id)
        changes = {
            field: value.strip()
            for field, value in (
                ("telegram", telegram),
                ("first_name", first_name),
                ("last_name", last_name),
            )
            if value is not None
        }
        if not changes:
            return user
        return await self.update(db, db_obj=user, obj_in=changes)

    async def set_username_once(
        self, db: AsyncSession, *, user_id: int, username: str
    ) -> User:
        """
        Assign a username to an account that has none.

        The write is a conditional UPDATE matching only an empty username,
        so of two concurrent callers at most one succeeds.
        """
        if not username.strip():
            raise InvalidUsernameException("Username is required")
        username = validate_username(username)

        taken = await db.execute(
            select(User.id).where(User.username == username, User.id != user_id)
        )
        if taken.first() is not None:
            raise ConflictException("A user with this username already exists")

        result = await db.execute(
            update(User)
            .where(
                User.id == user_id,
                or_(User.username.is_(None), User.username == ""),
            )
            .values(username=username)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = await db.execute(select(User.username).where(User.id == user_id))
            row = current.first()
            if row is None:
                raise NotFoundException("User", user_id)
            raise UsernameAlreadySetException()

        refreshed = await db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return refreshed.scalar_one()


crud_user = CRUDUser(User)
