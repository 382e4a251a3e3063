"""
Project Pydantic schemas.
"""
from __future__ import annotations

from pydantic import Field, field_validator

from app.schemas.base import APIModel, UTCDateTime


class ProjectCreate(APIModel):
    name: str = Field(max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v


class ProjectRead(APIModel):
    id: int
    name: str
    created_at: UTCDateTime
