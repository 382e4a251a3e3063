"""
UserProject ORM model.
Join table granting a non-admin user access to a project.
"""
from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class UserProject(Base):
    __tablename__ = "user_projects"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )

    __table_args__ = (Index("ix_user_projects_project_id", "project_id"),)

    def __repr__(self) -> str:
        return f"<UserProject user_id={self.user_id} project_id={self.project_id}>"
