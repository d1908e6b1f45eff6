"""Run the Telegram bot with long polling: ``python -m quotebot.bot``."""

import asyncio
import logging

from aiogram import Bot

from quotebot.core.config import get_settings
from quotebot.core.logging import init_logging
from .handlers import build_dispatcher
from .transport import WorkerPool, build_aiogram_dispatcher

logger = logging.getLogger("quotebot.bot")


async def main() -> None:
    settings = get_settings()
    init_logging(debug=settings.debug)
    if not settings.telegram_bot_token:
        raise RuntimeError("Missing required env var TELEGRAM_BOT_TOKEN")

    bot = Bot(token=settings.telegram_bot_token)
    me = await bot.get_me()
    logger.info("Authorized on account %s", me.username)
    if me.username:
        settings.bot_name = me.username

    pool = WorkerPool(build_dispatcher(settings), settings.worker_count)
    dp = build_aiogram_dispatcher(pool)
    pool.start()
    try:
        await dp.start_polling(bot)
    finally:
        await pool.stop()
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
