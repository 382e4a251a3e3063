"""
User Pydantic schemas.
Covers registration, login, profile updates and admin user management.
"""
from __future__ import annotations

from pydantic import AliasChoices, EmailStr, Field, field_validator

from app.models.user import UserRole
from app.schemas.base import APIModel, UTCDateTime


def _normalize_email(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


# ── Create ────────────────────────────────────────────────────────────────────

class UserRegister(APIModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)
    username: str | None = Field(default=None, max_length=64)
    first_name: str = Field(default="", max_length=255)
    last_name: str = Field(default="", max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: object) -> object:
        return _normalize_email(v)


class UserCreate(UserRegister):
    """Admin-side creation; role is validated by the data layer."""

    role: str = Field(default=UserRole.USER.value, max_length=16)


class LoginRequest(APIModel):
    login: str = Field(
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("login", "email"),
    )
    password: str = Field(min_length=1, max_length=72)

    @field_validator("login", mode="before")
    @classmethod
    def normalize_login(cls, v: object) -> object:
        return _normalize_email(v)


# ── Update ────────────────────────────────────────────────────────────────────

class ProfileUpdate(APIModel):
    password: str | None = Field(default=None, max_length=72)
    telegram: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=64)


class UserAdminUpdate(APIModel):
    role: str | None = Field(default=None, max_length=16)
    password: str | None = Field(default=None, max_length=72)
    project_ids: list[int] | None = None
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)


# ── Read ──────────────────────────────────────────────────────────────────────

class UserRead(APIModel):
    id: int
    email: str
    username: str | None
    role: UserRole
    first_name: str
    last_name: str
    telegram: str
    created_at: UTCDateTime
    project_ids: list[int] | None = None

    @classmethod
    def from_user(cls, user: object, project_ids: list[int] | None) -> UserRead:
        read = cls.model_validate(user)
        read.project_ids = project_ids
        return read
