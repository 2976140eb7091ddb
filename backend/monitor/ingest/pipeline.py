"""Routes incoming guild messages to backfill or live ingestion."""

from __future__ import annotations

import asyncio
import logging

import discord

from shared.database import DB_ERRORS

from .backfill import BackfillWalker
from .live import LiveIngestionHandler
from .registry import SpaceRegistry

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Entry point for every guild message.

    The first message from an unregistered guild launches a background
    backfill instead of being handled live; the backfill picks it up from
    the channel history. Backfill tasks are tracked so shutdown can cancel
    them before the database pool closes.
    """

    def __init__(
        self,
        registry: SpaceRegistry,
        handler: LiveIngestionHandler,
        walker: BackfillWalker,
    ):
        self.registry = registry
        self.handler = handler
        self.walker = walker
        self._backfills: dict[str, asyncio.Task] = {}

    @property
    def active_backfills(self) -> list[str]:
        return [key for key, task in self._backfills.items() if not task.done()]

    async def dispatch(self, message: discord.Message) -> None:
        guild = message.guild
        if guild is None:
            return

        try:
            claimed = await self.registry.claim(guild.id)
        except DB_ERRORS as e:
            logger.error(f"Guild registration check failed for {guild.id}: {type(e).__name__}: {e}")
            return

        if claimed:
            self.launch_backfill(guild)
        else:
            await self.handler.handle(message, guild.id)

    def launch_backfill(self, guild: discord.Guild) -> asyncio.Task:
        key = str(guild.id)
        task = asyncio.create_task(self.walker.walk(guild), name=f"backfill:{key}")
        self._backfills[key] = task
        task.add_done_callback(lambda t, key=key: self._on_backfill_done(key, t))
        return task

    def _on_backfill_done(self, key: str, task: asyncio.Task) -> None:
        if self._backfills.get(key) is task:
            del self._backfills[key]
        if task.cancelled():
            logger.warning(f"Backfill for guild {key} cancelled")
        elif (exc := task.exception()) is not None:
            logger.error(f"Backfill for guild {key} crashed", exc_info=exc)

    async def wait_for_backfills(self) -> None:
        """Block until every backfill running right now has finished."""
        tasks = list(self._backfills.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def cancel_backfills(self) -> int:
        """Cancel running backfills and wait for them to unwind. Returns how many ran."""
        tasks = list(self._backfills.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} running backfill(s)")
        return len(tasks)

    async def shutdown(self) -> None:
        await self.cancel_backfills()
