"""
Task comment CRUD operations.
"""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundException
from app.crud.base import CRUDBase
from app.models.comment import TaskComment
from app.models.task import Task


class CRUDComment(CRUDBase[TaskComment]):

    async def get_with_author(
        self, db: AsyncSession, comment_id: int
    ) -> TaskComment | None:
        result = await db.execute(
            select(TaskComment)
            .options(selectinload(TaskComment.author))
            .where(TaskComment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_comment(
        self,
        db: AsyncSession,
        *,
        task_id: int,
        body: str,
        author_id: int | None,
    ) -> TaskComment:
        if await db.get(Task, task_id) is None:
            raise NotFoundException("Task", task_id)

        comment = TaskComment(task_id=task_id, body=body, author_id=author_id)
        db.add(comment)
        await db.flush()
        return await self.get_with_author(db, comment.id)  # type: ignore[return-value]

    async def list_by_task_ids(
        self, db: AsyncSession, *, task_ids: Iterable[int]
    ) -> dict[int, list[TaskComment]]:
        """Comments for many tasks in one query, oldest first per task."""
        ids = list(dict.fromkeys(task_ids))
        comments: dict[int, list[TaskComment]] = {tid: [] for tid in ids}
        if not ids:
            return comments
        result = await db.execute(
            select(TaskComment)
            .options(selectinload(TaskComment.author))
            .where(TaskComment.task_id.in_(ids))
            .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
        )
        for comment in result.scalars().all():
            comments[comment.task_id].append(comment)
        return comments

    async def list_by_task(self, db: AsyncSession, *, task_id: int) -> list[TaskComment]:
        comments = await self.list_by_task_ids(db, task_ids=[task_id])
        return comments[task_id]

    async def delete_comment(self, db: AsyncSession, *, comment: TaskComment) -> None:
        await db.delete(comment)
        await db.flush()


crud_comment = CRUDComment(TaskComment)
