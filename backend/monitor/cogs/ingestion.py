"""Feeds every guild message into the ingestion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from monitor.bot import MonitorBot


class Ingestion(commands.Cog):
    def __init__(self, bot: MonitorBot):
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        await self.bot.pipeline.dispatch(message)

    async def cog_unload(self) -> None:
        await self.bot.pipeline.shutdown()


async def setup(bot: MonitorBot) -> None:
    await bot.add_cog(Ingestion(bot))
