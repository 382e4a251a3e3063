"""
Schema creation and startup seeding.
Ensures the default project and an admin account exist.
"""
from __future__ import annotations

import logging
import secrets

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.config import settings
from app.core.security import hash_password
from app.crud.grant import crud_grant
from app.crud.project import crud_project
from app.crud.user import crud_user
from app.db.base import Base
from app.models.project import DEFAULT_PROJECT_ID
from app.models.user import UserRole

logger = logging.getLogger(__name__)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ensure_default_project(db: AsyncSession) -> None:
    """Insert or rename the default project, keeping id sequences consistent."""
    project = await crud_project.ensure_default(db, name=settings.DEFAULT_PROJECT_NAME)
    if db.get_bind().dialect.name == "postgresql":
        # Explicit id inserts leave the serial sequence behind.
        await db.execute(
            text(
                "SELECT setval(pg_get_serial_sequence('projects', 'id'), "
                "GREATEST((SELECT MAX(id) FROM projects), 1))"
            )
        )
    logger.info("Default project id=%s name=%r", project.id, project.name)


async def ensure_admin_user(db: AsyncSession) -> None:
    """
    Make sure an admin account exists.

    An existing admin picks up ADMIN_EMAIL and, when set, ADMIN_PASSWORD.
    Otherwise one is created; without ADMIN_PASSWORD a random password is
    generated and logged once.
    """
    email = settings.ADMIN_EMAIL.strip().lower()
    admin = await crud_user.get_first_admin(db)

    if admin is not None:
        if email and admin.email != email and not await crud_user.exists(db, email=email):
            admin.email = email
            logger.info("Admin email updated to %s", email)
        if settings.ADMIN_PASSWORD:
            admin.hashed_password = hash_password(settings.ADMIN_PASSWORD)
            logger.info("Admin password updated from ADMIN_PASSWORD")
        await db.flush()
        return

    password = settings.ADMIN_PASSWORD
    if not password:
        password = secrets.token_urlsafe(12)
        logger.warning("Created admin %s with generated password: %s", email, password)

    existing = await crud_user.get_by_email(db, email)
    if existing is not None:
        # Promote the account holding the admin email instead of colliding with it.
        existing.role = UserRole.ADMIN
        existing.hashed_password = hash_password(password)
        await db.flush()
        await crud_grant.add_project(db, user_id=existing.id, project_id=DEFAULT_PROJECT_ID)
        logger.info("Promoted user id=%s to admin", existing.id)
        return

    admin = await crud_user.create_user(
        db,
        email=email,
        password=password,
        role=UserRole.ADMIN,
    )
    logger.info("Created admin user id=%s email=%s", admin.id, admin.email)


async def seed_defaults(db: AsyncSession) -> None:
    await ensure_default_project(db)
    await ensure_admin_user(db)


async def init_db(engine: AsyncEngine, session_factory) -> None:
    """Create tables when enabled and seed the defaults in one transaction."""
    if settings.AUTO_CREATE_SCHEMA:
        await create_schema(engine)
    async with session_factory() as session:
        async with session.begin():
            await seed_defaults(session)
