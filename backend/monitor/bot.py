"""
DirtOnYou monitor bot
discord.py 2.x with slash commands
"""

from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands
from dotenv import load_dotenv

from monitor.core.config import ENV_FILE, MonitorSettings, get_settings
from monitor.core.logging import setup_logging
from monitor.core.notifier import OperatorNotifier
from monitor.ingest import (
    BackfillWalker,
    IngestionPipeline,
    LiveIngestionHandler,
    MessagePersister,
    SpaceRegistry,
    TriggerWordStore,
)
from shared.database import DatabaseManager, PoolConfig
from shared.migrations.runner import MigrationRunner
from shared.repositories import FlaggedMessageRepository, SpaceRepository, TriggerWordRepository

logger = logging.getLogger("monitor_bot")


class MonitorBot(commands.Bot):
    """Watches guild messages for trigger words"""

    trigger_store: TriggerWordStore
    registry: SpaceRegistry
    pipeline: IngestionPipeline
    messages: FlaggedMessageRepository
    spaces: SpaceRepository

    def __init__(self, settings: MonitorSettings):
        intents = discord.Intents.default()
        intents.message_content = True  # matching needs message text

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.settings = settings
        self.db = DatabaseManager(
            settings.database_url,
            PoolConfig.for_service(
                "monitor",
                timeout=settings.db_timeout,
                command_timeout=settings.db_timeout,
                ssl=settings.db_ssl,
            ),
        )
        self.initial_extensions = [
            "monitor.cogs.ingestion",
            "monitor.cogs.words",
            "monitor.cogs.reports",
        ]

    def build_components(self) -> None:
        """Wire repositories and ingestion components to the open pool."""
        pool = self.db.pool
        timeout = self.settings.db_timeout

        self.messages = FlaggedMessageRepository(pool, timeout)
        self.spaces = SpaceRepository(pool, timeout)
        self.trigger_store = TriggerWordStore(TriggerWordRepository(pool, timeout))
        self.registry = SpaceRegistry(self.spaces)

        handler = LiveIngestionHandler(self, self.trigger_store, MessagePersister(self.messages))
        walker = BackfillWalker(
            handler,
            OperatorNotifier(self, self.settings.operator_id),
            self.registry,
            page_size=self.settings.backfill_page_size,
            page_delay=self.settings.backfill_page_delay,
        )
        self.pipeline = IngestionPipeline(self.registry, handler, walker)

    async def setup_hook(self) -> None:
        await self.db.connect()
        await MigrationRunner(self.db.pool).run_pending()

        self.build_components()
        if not await self.trigger_store.reload():
            logger.warning("Starting without a trigger word list; messages are ignored until it loads")

        loaded = []
        failed = []
        for extension in self.initial_extensions:
            try:
                await self.load_extension(extension)
                loaded.append(extension.split(".")[-1])
            except commands.ExtensionError as e:
                failed.append(f"{extension.split('.')[-1]} ({e})")

        if loaded:
            logger.info(f"Loaded cogs: {', '.join(loaded)}")
        if failed:
            logger.error(f"Failed to load: {', '.join(failed)}")

        guild_id = self.settings.discord_guild_id
        if guild_id:
            # Guild sync is immediate; global sync can take up to an hour
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info(f"Slash commands synced to guild {guild_id}")
        else:
            await self.tree.sync()
            logger.info("Slash commands synced globally")

    async def on_ready(self) -> None:
        logger.info(f"Logged in as: {self.user} (ID: {self.user.id if self.user else '?'})")
        logger.info(f"Connected to {len(self.guilds)} guilds | discord.py {discord.__version__}")

    async def close(self) -> None:
        if hasattr(self, "pipeline"):
            await self.pipeline.shutdown()
        await super().close()
        await self.db.disconnect()


async def main() -> None:
    load_dotenv(dotenv_path=ENV_FILE, encoding="utf-8")
    settings = get_settings()
    setup_logging(settings.log_level)

    async with MonitorBot(settings) as bot:
        await bot.start(settings.discord_bot_token)


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped manually")


if __name__ == "__main__":
    run()
