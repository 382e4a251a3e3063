"""
Chat command dispatcher.

Parses the bot's text commands and runs them through the task and project
services under the service scope. It knows nothing about Telegram, so it
can be driven from tests or any other chat transport.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import (
    ConflictException,
    InvalidStatusException,
    LiteTaskException,
    NotFoundException,
    ProjectNotFoundException,
)
from app.crud.project import crud_project
from app.models.project import DEFAULT_PROJECT_ID
from app.models.task import TaskStatus
from app.services.access_service import AccessScope
from app.services.project_service import project_service
from app.services.task_service import task_service

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "LiteTask бот\n\n"
    "Команды:\n"
    "/new [projectId] <название> |комментарий — создать задачу в проекте (по умолчанию Общий)\n"
    "/status <id> <new|in_progress|done> — сменить статус\n"
    "/list [projectId|all] [all] — показать задачи (по умолчанию новые задачи в Общем; "
    "/list all — все проекты и статусы, /list <projectId> all — все статусы проекта)\n"
    "/projects — список проектов\n"
    "/project <название> — создать проект"
)
UNKNOWN_COMMAND = "Неизвестная команда. Отправь /help для подсказки."

Handler = Callable[[AsyncSession, str], Awaitable[str]]


def split_command(text: str) -> tuple[str, str]:
    """Split '/cmd@bot rest' into ('/cmd', 'rest')."""
    head, _, rest = text.strip().partition(" ")
    command = head.lower().split("@", 1)[0]
    return command, rest.strip()


def parse_title_and_comment(content: str) -> tuple[str, str]:
    title, _, comment = content.partition("|")
    return title.strip(), comment.strip()


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


class BotCommands:
    """Dispatches one chat message to its command handler and returns the reply."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._scope = AccessScope.service()
        self._handlers: dict[str, Handler] = {
            "/new": self._new_task,
            "/add": self._new_task,
            "/status": self._set_status,
            "/move": self._set_status,
            "/list": self._list_tasks,
            "/projects": self._list_projects,
            "/project": self._create_project,
        }

    async def handle(self, text: str) -> str | None:
        text = text.strip()
        if not text:
            return None
        command, rest = split_command(text)
        if command in ("/start", "/help"):
            return HELP_TEXT
        handler = self._handlers.get(command)
        if handler is None:
            return UNKNOWN_COMMAND

        try:
            async with self._session_factory() as db:
                async with db.begin():
                    return await handler(db, rest)
        except LiteTaskException as exc:
            logger.info("Bot command %s rejected: %s", command, exc.detail)
            return self._error_reply(exc)

    def _error_reply(self, exc: LiteTaskException) -> str:
        if isinstance(exc, ProjectNotFoundException):
            return "Проект не найден"
        if isinstance(exc, NotFoundException):
            return "Задача не найдена"
        if isinstance(exc, InvalidStatusException):
            return "Недопустимый статус. Используй new, in_progress или done."
        if isinstance(exc, ConflictException):
            return "Проект с таким названием уже существует"
        return f"Ошибка: {exc.detail}"

    # ── Commands ──────────────────────────────────────────────────────────────

    async def _new_task(self, db: AsyncSession, rest: str) -> str:
        project_id = DEFAULT_PROJECT_ID
        content = rest
        first, _, tail = rest.partition(" ")
        parsed = _parse_int(first) if first else None
        if parsed is not None:
            project_id = parsed
            content = tail.strip()
        if not content:
            return "Используй: /new [projectId] <название> |комментарий (комментарий необязателен)"

        title, comment = parse_title_and_comment(content)
        if not title:
            return "Название задачи не может быть пустым"

        task = await task_service.create_task(
            db,
            title=title,
            description=comment,
            project_id=project_id,
            scope=self._scope,
        )
        project_name = await project_service.project_name(db, project_id=task.project_id)
        return f"Создана #{task.id} ({project_name}) [{task.status.label}]: {task.title}"

    async def _set_status(self, db: AsyncSession, rest: str) -> str:
        parts = rest.split()
        if len(parts) < 2:
            return "Используй: /status <id> <new|in_progress|done>"
        task_id = _parse_int(parts[0])
        if task_id is None:
            return "ID задачи должен быть числом"

        task = await task_service.set_status(
            db,
            task_id=task_id,
            status=parts[1].strip().lower(),
            scope=self._scope,
        )
        project_name = await project_service.project_name(db, project_id=task.project_id)
        return f"Статус задачи #{task.id} ({project_name}) теперь [{task.status.label}]"

    async def _list_tasks(self, db: AsyncSession, rest: str) -> str:
        project_id: int | None = DEFAULT_PROJECT_ID
        status: TaskStatus | None = TaskStatus.NEW
        fields = rest.split()
        if fields:
            if fields[0].lower() == "all":
                project_id, status = None, None
            elif fields[0].lstrip("-").isdigit():
                project_id = int(fields[0])
                if len(fields) > 1 and fields[1].lower() == "all":
                    status = None

        tasks = await task_service.list_tasks(
            db, scope=self._scope, project_id=project_id, status=status
        )
        if not tasks:
            return "Задач пока нет"

        header = "Новые задачи:" if status is TaskStatus.NEW else "Задачи:"
        if project_id is None:
            header += " (все проекты)"
        else:
            header += f" (проект {await project_service.project_name(db, project_id=project_id)})"
        if status is None:
            header += " (все статусы)"

        names = await crud_project.name_map(db)
        lines = [header]
        for task in tasks:
            name = names.get(task.project_id, "")
            lines.append(f"#{task.id} ({name}) [{task.status.label}] {task.title}")
        return "\n".join(lines)

    async def _list_projects(self, db: AsyncSession, rest: str) -> str:
        projects = await project_service.list_projects(db, scope=self._scope)
        if not projects:
            return "Проектов пока нет"
        lines = ["Проекты:"]
        lines.extend(f"{p.id} — {p.name}" for p in projects)
        return "\n".join(lines)

    async def _create_project(self, db: AsyncSession, rest: str) -> str:
        if not rest:
            return "Используй: /project <название>"
        project = await project_service.create_project(db, name=rest, scope=self._scope)
        return f"Проект создан: #{project.id} {project.name}"
