"""Read-only reports over stored flagged messages."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from monitor.core.config import BOT_NAME
from monitor.core.responses import send_followup
from shared.database import DB_ERRORS

if TYPE_CHECKING:
    from monitor.bot import MonitorBot

logger = logging.getLogger(__name__)

MEDALS = ("🥇", "🥈", "🥉")
EMPTY_BOARD = "No words have been recorded yet! Be the first :D"

HELP_TEXT = f"""
# Welcome to **{BOT_NAME}**!

Commands:
> **/unholy <user>**: All _flagged_ messages of the given user, with when and where each was sent.
> **/scoreboard**: The number of _flagged_ messages per user.
> **/words**: Every _flagged_ word the bot monitors.
> **/commonwords**: How often each word has been used.
> **/help**: This message.

Admin commands:
> **/unholyadd <word>**: Adds a word to be _flagged_. Only affects new messages; use _/deleteallmessages_ to rescan history.
> **/unholyremove <word>**: Stops monitoring a word. Messages already logged with it are kept.
> **/deleteallmessages**: Deletes every stored message and backtracks each server again on its next message. This is slow because of Discord rate limits.
"""


class Reports(commands.Cog):
    def __init__(self, bot: MonitorBot):
        self.bot = bot

    def _scope(self, interaction: discord.Interaction) -> str | None:
        """Guild filter for a report; the main server sees every guild."""
        guild = interaction.guild
        if guild is None or guild.id == self.bot.settings.main_server_id:
            return None
        return str(guild.id)

    async def _username(self, user_id: str) -> str:
        user = self.bot.get_user(int(user_id))
        if user is not None:
            return user.name
        try:
            return (await self.bot.fetch_user(int(user_id))).name
        except discord.HTTPException as e:
            logger.debug(f"Error fetching user {user_id}: {e}")
            return "Unknown User"

    def _guild_name(self, server_id: str) -> str:
        guild = self.bot.get_guild(int(server_id))
        return guild.name if guild else server_id

    @app_commands.command(name="unholy", description="Shows the flagged messages of a given user")
    @app_commands.describe(user="Select the user you want to lookup")
    async def unholy(self, interaction: discord.Interaction, user: discord.User) -> None:
        await interaction.response.defer()
        try:
            messages = await self.bot.messages.history(str(user.id), self._scope(interaction))
        except DB_ERRORS as e:
            logger.error(f"History query failed for {user.id}: {type(e).__name__}: {e}")
            await send_followup(interaction, "Failed to query database.")
            return

        if not messages:
            await send_followup(interaction, f"{user.name} has a clean record. For now.")
            return

        lines = [
            f"{self._guild_name(m.server_id)}: {user.name}: **{m.message}**: "
            f"{m.timestamp:%Y-%m-%d %H:%M:%S}"
            for m in messages
        ]
        await send_followup(interaction, "\n".join(lines))

    @app_commands.command(name="scoreboard", description="Shows who has the most flagged messages")
    async def scoreboard(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            scores = await self.bot.messages.scoreboard(self._scope(interaction))
        except DB_ERRORS as e:
            logger.error(f"Scoreboard query failed: {type(e).__name__}: {e}")
            await send_followup(interaction, "Failed to fetch scoreboard.")
            return

        if not scores:
            await send_followup(interaction, EMPTY_BOARD)
            return

        embed = discord.Embed(
            title="Scoreboard",
            description="Top message counts:",
            color=discord.Color.green(),
            timestamp=datetime.now(timezone.utc),
        )
        for rank, score in enumerate(scores[:25]):
            name = await self._username(score.user_id)
            if rank < len(MEDALS):
                name = f"{MEDALS[rank]} {name}"
            embed.add_field(name=name, value=f"{score.message_count} entries", inline=False)

        try:
            await interaction.followup.send(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Error sending scoreboard: {e}")

    @app_commands.command(name="commonwords", description="Shows which words have been used the most")
    async def common_words(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            usage = await self.bot.messages.word_usage(self._scope(interaction))
        except DB_ERRORS as e:
            logger.error(f"Word usage query failed: {type(e).__name__}: {e}")
            await send_followup(interaction, "Failed to fetch common words.")
            return

        if not usage:
            await send_followup(interaction, EMPTY_BOARD)
            return

        body = "\n".join(f"{u.word}: {u.usage_count}" for u in usage)
        await send_followup(interaction, "Common Words Usage:\n" + body)

    @app_commands.command(name="help", description="Gives a small guide on how to use the bot")
    async def help(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        await send_followup(interaction, HELP_TEXT)


async def setup(bot: MonitorBot) -> None:
    await bot.add_cog(Reports(bot))
