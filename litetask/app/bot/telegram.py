"""
Telegram transport for the chat commands.
Long-polls with pyTelegramBotAPI and answers only the configured chat.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from telebot import types
from telebot.async_telebot import AsyncTeleBot
from telebot.asyncio_helper import ApiTelegramException

from app.bot.commands import BotCommands
from app.core.config import settings

logger = logging.getLogger(__name__)

FAILURE_REPLY = "Не удалось выполнить команду"


def register_handlers(bot: AsyncTeleBot, commands: BotCommands, chat_id: int) -> None:

    @bot.message_handler(func=lambda message: message.chat.id == chat_id)
    async def on_message(message: types.Message) -> None:
        try:
            reply = await commands.handle(message.text or "")
        except Exception:
            logger.exception("Bot command failed: %r", message.text)
            reply = FAILURE_REPLY
        if not reply:
            return
        try:
            await bot.send_message(chat_id, reply)
        except ApiTelegramException as exc:
            logger.error("Failed to send bot message: %s", exc)


async def run_bot(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Poll Telegram until cancelled."""
    try:
        chat_id = int(settings.BOT_CHAT_ID)
    except ValueError:
        logger.error("Telegram bot disabled: invalid BOT_CHAT_ID %r", settings.BOT_CHAT_ID)
        return

    bot = AsyncTeleBot(settings.BOT_TOKEN)
    register_handlers(bot, BotCommands(session_factory), chat_id)
    logger.info("Telegram bot started for chat %s", chat_id)
    try:
        await bot.infinity_polling(skip_pending=True)
    finally:
        await bot.close_session()
        logger.info("Telegram bot stopped")
