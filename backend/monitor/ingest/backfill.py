"""One-time walk through a guild's message history."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta

import discord

from monitor.core.notifier import OperatorNotifier

from .live import LiveIngestionHandler
from .registry import SpaceRegistry

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

# Failures that end one channel's walk; the rest of the guild continues.
FETCH_ERRORS: tuple[type[BaseException], ...] = (
    discord.HTTPException,
    OSError,
    asyncio.TimeoutError,
)


@dataclass
class BackfillReport:
    guild_name: str
    channels_scanned: int = 0
    messages_scanned: int = 0
    messages_flagged: int = 0
    pages_fetched: int = 0
    failed_channels: list[str] = field(default_factory=list)
    elapsed: float = 0.0


class BackfillWalker:
    """Pages through every text channel of a guild, newest page first.

    History pages are consumed in whatever order the API returns them;
    the cursor for the next page is the last message of the current one.
    No chronological order across pages or channels is assumed.
    """

    def __init__(
        self,
        handler: LiveIngestionHandler,
        notifier: OperatorNotifier,
        registry: SpaceRegistry,
        *,
        page_size: int = PAGE_SIZE,
        page_delay: float = 0.0,
    ):
        self.handler = handler
        self.notifier = notifier
        self.registry = registry
        self.page_size = page_size
        self.page_delay = page_delay

    async def fetch_page(
        self, channel: discord.TextChannel, before: discord.abc.Snowflake | None
    ) -> list[discord.Message]:
        return [m async for m in channel.history(limit=self.page_size, before=before)]

    async def walk(self, guild: discord.Guild) -> BackfillReport:
        report = BackfillReport(guild_name=guild.name)
        started = time.monotonic()
        channels = list(guild.text_channels)

        logger.info(f"Backfill started: {guild.name} ({guild.id}), {len(channels)} text channels")
        await self.notifier.send(
            f"I've started backtracking **{guild.name}**, I found **{len(channels)}** channels"
        )

        try:
            for channel in channels:
                await self.notifier.send(f"Started on **{channel.name}** in **{guild.name}**")
                scanned, completed = await self._walk_channel(guild, channel, report)
                report.channels_scanned += 1

                suffix = "" if completed else " (stopped early after an error)"
                await self.notifier.send(
                    f"Done with **{channel.name}** in **{guild.name}** "
                    f"found **{scanned}** messages.{suffix}"
                )
        finally:
            self.registry.mark_known(guild.id)
            report.elapsed = time.monotonic() - started

        elapsed = timedelta(seconds=round(report.elapsed))
        logger.info(
            f"Backfill finished: {guild.name} | {report.messages_scanned} scanned, "
            f"{report.messages_flagged} flagged, {len(report.failed_channels)} channel errors, {elapsed}"
        )
        await self.notifier.send(
            f"Server **{guild.name}** has been backtracked. It took {elapsed}. "
            f"Found a total of **{report.messages_scanned}** messages"
        )
        return report

    async def _walk_channel(
        self, guild: discord.Guild, channel: discord.TextChannel, report: BackfillReport
    ) -> tuple[int, bool]:
        """Walk one channel. Returns (messages scanned, finished without error)."""
        scanned = 0
        before: discord.abc.Snowflake | None = None

        while True:
            try:
                page = await self.fetch_page(channel, before)
            except FETCH_ERRORS as e:
                logger.error(
                    f"History fetch failed in #{channel.name} ({guild.name}): {type(e).__name__}: {e}"
                )
                report.failed_channels.append(channel.name)
                return scanned, False

            report.pages_fetched += 1
            if not page:
                break

            for message in page:
                if await self.handler.handle(message, guild.id):
                    report.messages_flagged += 1

            scanned += len(page)
            report.messages_scanned += len(page)
            before = discord.Object(id=page[-1].id)

            if len(page) < self.page_size:
                break
            if self.page_delay:
                await asyncio.sleep(self.page_delay)

        return scanned, True
