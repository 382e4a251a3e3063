"""
Task comment Pydantic schemas.
"""
from __future__ import annotations

from pydantic import Field, field_validator

from app.schemas.base import APIModel, UTCDateTime


class CommentCreate(APIModel):
    body: str = Field(max_length=10000)

    @field_validator("body")
    @classmethod
    def body_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("comment body is required")
        return v


class CommentRead(APIModel):
    id: int
    task_id: int
    body: str
    author_id: int | None
    author_email: str
    created_at: UTCDateTime
