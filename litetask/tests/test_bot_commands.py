"""
Chat command tests.
Commands run against the seeded test database without any Telegram traffic.
"""
from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.bot.commands import (
    HELP_TEXT,
    UNKNOWN_COMMAND,
    BotCommands,
    parse_title_and_comment,
    split_command,
)
from app.models.task import Task, TaskStatus

pytestmark = pytest.mark.asyncio


@pytest.fixture
def bot(session_factory: async_sessionmaker[AsyncSession]) -> BotCommands:
    return BotCommands(session_factory)


async def _task(session_factory: async_sessionmaker[AsyncSession], task_id: int) -> Task | None:
    async with session_factory() as db:
        result = await db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()


class TestParsing:
    async def test_split_command_strips_bot_mention(self) -> None:
        assert split_command("/New@LiteTaskBot  Buy milk ") == ("/new", "Buy milk")

    async def test_split_command_without_arguments(self) -> None:
        assert split_command("/list") == ("/list", "")

    async def test_title_and_comment(self) -> None:
        assert parse_title_and_comment(" Fix bug | see logs ") == ("Fix bug", "see logs")
        assert parse_title_and_comment("Only title") == ("Only title", "")


class TestHelp:
    async def test_help_and_start(self, bot: BotCommands) -> None:
        assert await bot.handle("/help") == HELP_TEXT
        assert await bot.handle("/start") == HELP_TEXT

    async def test_unknown_command(self, bot: BotCommands) -> None:
        assert await bot.handle("/dance") == UNKNOWN_COMMAND

    async def test_empty_message(self, bot: BotCommands) -> None:
        assert await bot.handle("   ") is None


class TestNewTask:
    async def test_new_in_default_project(self, bot: BotCommands, session_factory) -> None:
        reply = await bot.handle("/new Buy milk")
        assert reply == "Создана #1 (Общий) [Новая]: Buy milk"
        task = await _task(session_factory, 1)
        assert task is not None
        assert task.project_id == 1
        assert task.status == TaskStatus.NEW
        assert task.created_by is None

    async def test_new_with_project_and_comment(self, bot: BotCommands, session_factory) -> None:
        created = await bot.handle("/project Ремонт")
        assert created is not None and created.startswith("Проект создан: #2")

        reply = await bot.handle("/add 2 Paint walls | white")
        assert reply == "Создана #1 (Ремонт) [Новая]: Paint walls"
        task = await _task(session_factory, 1)
        assert task is not None
        assert task.description == "white"

    async def test_new_in_unknown_project(self, bot: BotCommands) -> None:
        assert await bot.handle("/new 42 Lost task") == "Проект не найден"

    async def test_new_without_title(self, bot: BotCommands) -> None:
        assert (await bot.handle("/new")).startswith("Используй")
        assert await bot.handle("/new | only comment") == "Название задачи не может быть пустым"


class TestSetStatus:
    async def test_set_status(self, bot: BotCommands) -> None:
        await bot.handle("/new Ship it")
        reply = await bot.handle("/status 1 done")
        assert reply == "Статус задачи #1 (Общий) теперь [Готова]"

    async def test_move_alias_reopens(self, bot: BotCommands) -> None:
        await bot.handle("/new Reopen")
        await bot.handle("/status 1 done")
        assert await bot.handle("/move 1 NEW") == "Статус задачи #1 (Общий) теперь [Новая]"

    async def test_invalid_status(self, bot: BotCommands) -> None:
        await bot.handle("/new Task")
        reply = await bot.handle("/status 1 archived")
        assert reply == "Недопустимый статус. Используй new, in_progress или done."

    async def test_missing_task(self, bot: BotCommands) -> None:
        assert await bot.handle("/status 99 done") == "Задача не найдена"

    async def test_bad_arguments(self, bot: BotCommands) -> None:
        assert (await bot.handle("/status 1")).startswith("Используй")
        assert await bot.handle("/status abc done") == "ID задачи должен быть числом"


class TestListTasks:
    async def test_empty(self, bot: BotCommands) -> None:
        assert await bot.handle("/list") == "Задач пока нет"

    async def test_default_lists_new_tasks_in_default_project(self, bot: BotCommands) -> None:
        await bot.handle("/new First")
        await bot.handle("/new Second")
        await bot.handle("/status 1 done")
        reply = await bot.handle("/list")
        assert reply == "Новые задачи: (проект Общий)\n#2 (Общий) [Новая] Second"

    async def test_all_statuses_in_project(self, bot: BotCommands) -> None:
        await bot.handle("/new First")
        await bot.handle("/status 1 in_progress")
        reply = await bot.handle("/list 1 all")
        assert reply == "Задачи: (проект Общий) (все статусы)\n#1 (Общий) [В работе] First"

    async def test_all_projects(self, bot: BotCommands) -> None:
        await bot.handle("/project Side")
        await bot.handle("/new Main task")
        await bot.handle("/new 2 Side task")
        reply = await bot.handle("/list all")
        lines = reply.splitlines()
        assert lines[0] == "Задачи: (все проекты) (все статусы)"
        assert lines[1:] == ["#2 (Side) [Новая] Side task", "#1 (Общий) [Новая] Main task"]


class TestProjects:
    async def test_list_projects(self, bot: BotCommands) -> None:
        await bot.handle("/project Side")
        reply = await bot.handle("/projects")
        assert reply == "Проекты:\n2 — Side\n1 — Общий"

    async def test_duplicate_project(self, bot: BotCommands) -> None:
        await bot.handle("/project Side")
        assert await bot.handle("/project Side") == "Проект с таким названием уже существует"

    async def test_project_without_name(self, bot: BotCommands) -> None:
        assert await bot.handle("/project") == "Используй: /project <название>"
