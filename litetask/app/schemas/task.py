"""
Task Pydantic schemas.
Status values are plain strings here; the data layer owns their validation.
"""
from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from app.models.project import DEFAULT_PROJECT_ID
from app.models.task import TaskStatus
from app.schemas.base import APIModel, UTCDateTime
from app.schemas.comment import CommentRead


# ── Create ────────────────────────────────────────────────────────────────────

class TaskCreate(APIModel):
    title: str = Field(max_length=500)
    description: str = Field(
        default="",
        max_length=10000,
        validation_alias=AliasChoices("description", "comment"),
    )
    project_id: int = Field(
        default=DEFAULT_PROJECT_ID,
        validation_alias=AliasChoices("projectId", "project_id"),
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is required")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()

    @field_validator("project_id", mode="before")
    @classmethod
    def default_project_for_zero(cls, v: object) -> object:
        return DEFAULT_PROJECT_ID if v in (None, 0) else v


# ── Update ────────────────────────────────────────────────────────────────────

class TaskDescriptionUpdate(APIModel):
    description: str = Field(
        max_length=10000,
        validation_alias=AliasChoices("description", "comment"),
    )

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return v.strip()


class TaskStatusUpdate(APIModel):
    status: str = Field(max_length=32)

    @field_validator("status")
    @classmethod
    def strip_status(cls, v: str) -> str:
        return v.strip()


# ── Read ──────────────────────────────────────────────────────────────────────

class TaskRead(APIModel):
    id: int
    title: str
    status: TaskStatus
    description: str
    project_id: int
    created_at: UTCDateTime
    created_by: int | None
    author_email: str
    author_first_name: str
    author_last_name: str


class TaskReadWithComments(TaskRead):
    comments: list[CommentRead] = Field(default_factory=list)

    @classmethod
    def from_task(cls, task: object, comments: list[object]) -> TaskReadWithComments:
        read = cls.model_validate(task)
        read.comments = [CommentRead.model_validate(c) for c in comments]
        return read
