from __future__ import annotations

"""Telegram binding: aiogram long polling feeding a bounded worker pool.

The aiogram handler only enqueues; ``worker_count`` workers drain the queue and
run the blocking dispatch in a thread each, so a slow upstream holds up only
the worker serving that message. Replies to different messages are unordered.
"""
import asyncio
import logging
from typing import Any, List, Optional

from aiogram import F, Router
from aiogram import Dispatcher as AiogramDispatcher
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from quotebot.core.logging import request_context
from .commands import looks_like_command
from .handlers import Dispatcher

logger = logging.getLogger("quotebot.bot")


def is_explicit_command(message: Any) -> bool:
    """True when Telegram tagged the message as starting with a bot command."""
    entities = getattr(message, "entities", None)
    if entities is None:
        return looks_like_command(message.text or "")
    return any(e.type == "bot_command" and e.offset == 0 for e in entities)


class WorkerPool:
    def __init__(self, dispatcher: Dispatcher, worker_count: int):
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        self._dispatcher = dispatcher
        self._worker_count = worker_count
        self._queue: asyncio.Queue = asyncio.Queue()
        self._workers: List[asyncio.Task] = []

    @property
    def queue(self) -> asyncio.Queue:
        return self._queue

    async def submit(self, message: Any) -> None:
        await self._queue.put(message)

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"quote-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("started %d quote workers", self._worker_count)

    async def stop(self) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

    async def join(self) -> None:
        await self._queue.join()

    async def _worker(self, index: int) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self.process(message)
            except Exception:
                logger.exception("worker %d failed on message", index)
            finally:
                self._queue.task_done()

    async def process(self, message: Any) -> Optional[str]:
        text = message.text or ""
        chat_id = getattr(getattr(message, "chat", None), "id", None)
        with request_context(chat_id):
            sender = getattr(getattr(message, "from_user", None), "username", None)
            logger.info("[%s] %s", sender or "-", text)
            reply = await asyncio.to_thread(
                self._dispatcher.handle, text, is_explicit_command(message)
            )
            if reply is None:
                return None
            try:
                await message.reply(reply, parse_mode=None)
            except TelegramAPIError:
                logger.exception("failed to send reply")
            return reply


def build_router(pool: WorkerPool) -> Router:
    router = Router(name="quotes")

    @router.message(F.text)
    async def enqueue(message: Message) -> None:
        await pool.submit(message)

    return router


def build_aiogram_dispatcher(pool: WorkerPool) -> AiogramDispatcher:
    dp = AiogramDispatcher()
    dp.include_router(build_router(pool))
    return dp
