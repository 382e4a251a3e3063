"""
Test configuration and shared fixtures.
Each test gets a fresh in-memory SQLite database seeded like a real startup.
"""
from __future__ import annotations

import os

# Settings are read at import time; these must be set before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("AUTH_SECRET", "test-secret-key-that-is-at-least-32-bytes")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "AdminPass1")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BOT_TOKEN", "")
os.environ.setdefault("BOT_CHAT_ID", "")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.init_db import create_schema, seed_defaults  # noqa: E402
from app.db.session import enable_sqlite_foreign_keys, get_db  # noqa: E402
from app.main import app  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass1"
USER_PASSWORD = "UserPass1"

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ── Database ──────────────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A private in-memory database; StaticPool keeps it on one connection."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    await create_schema(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory over the test engine, with default project and admin seeded."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        async with session.begin():
            await seed_defaults(session)
    return factory


@pytest_asyncio.fixture
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests share the test session, one transaction each."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Helper fixtures ───────────────────────────────────────────────────────────

LoginFn = Callable[[str, str], Awaitable[dict[str, str]]]
MakeUserFn = Callable[..., Awaitable[dict[str, Any]]]


@pytest_asyncio.fixture
async def login_as(client: AsyncClient) -> LoginFn:
    """
    Log in and return headers carrying the session cookie.

    The client's cookie jar is cleared so every request states its caller
    explicitly through the returned headers.
    """

    async def _login(login: str, password: str) -> dict[str, str]:
        response = await client.post(
            "/api/auth/login", json={"login": login, "password": password}
        )
        assert response.status_code == 200, response.text
        token = response.cookies.get("auth")
        assert token
        client.cookies.clear()
        return {"Cookie": f"auth={token}"}

    return _login


@pytest_asyncio.fixture
async def admin_headers(login_as: LoginFn) -> dict[str, str]:
    return await login_as(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest_asyncio.fixture
async def make_user(client: AsyncClient, admin_headers: dict[str, str]) -> MakeUserFn:
    """Create a user through the admin API, optionally replacing its grants."""

    async def _make_user(
        email: str,
        *,
        role: str = "user",
        password: str = USER_PASSWORD,
        project_ids: list[int] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        response = await client.post(
            "/api/users",
            json={"email": email, "password": password, "role": role, **extra},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        user = response.json()
        if project_ids is not None:
            response = await client.patch(
                f"/api/users/{user['id']}",
                json={"projectIds": project_ids},
                headers=admin_headers,
            )
            assert response.status_code == 200, response.text
            user = response.json()
        return user

    return _make_user


@pytest_asyncio.fixture
async def user_headers(make_user: MakeUserFn, login_as: LoginFn) -> dict[str, str]:
    """A regular user with the default project granted."""
    await make_user("user@example.com")
    return await login_as("user@example.com", USER_PASSWORD)


@pytest_asyncio.fixture
async def make_project(client: AsyncClient, admin_headers: dict[str, str]):
    async def _make_project(name: str) -> dict[str, Any]:
        response = await client.post(
            "/api/projects", json={"name": name}, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_project


@pytest_asyncio.fixture
async def make_task(client: AsyncClient):
    async def _make_task(
        headers: dict[str, str], title: str = "Task", **fields: Any
    ) -> dict[str, Any]:
        response = await client.post(
            "/api/tasks", json={"title": title, **fields}, headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _make_task
