"""
Aggregates all API routers into a single APIRouter.
"""
from __future__ import annotations

from fastapi import APIRouter

from app.api.v1 import auth, comments, profile, projects, tasks, users

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(profile.router)
api_router.include_router(users.router)
api_router.include_router(projects.router)
api_router.include_router(tasks.router)
api_router.include_router(comments.router)
