"""
User ORM model.
Stores authentication credentials, profile data, and role information.
"""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"
    BLOCKED = "blocked"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    # NULL until set; the unique constraint ignores NULLs.
    username: Mapped[str | None] = mapped_column(
        String(32),
        unique=True,
        nullable=True,
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role_enum",
            native_enum=False,
            length=16,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
    )
    first_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )
    last_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )
    telegram: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=""
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_users_role", "role"),
        {"sqlite_autoincrement": True},
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_blocked(self) -> bool:
        return self.role == UserRole.BLOCKED

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
