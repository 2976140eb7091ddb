"""Trigger word administration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from monitor.core.responses import send_followup
from shared.database import DB_ERRORS

if TYPE_CHECKING:
    from monitor.bot import MonitorBot

logger = logging.getLogger(__name__)

DENIED = "Skill issue"


class Words(commands.Cog):
    """Add, remove and list monitored words; purge stored messages."""

    def __init__(self, bot: MonitorBot):
        self.bot = bot

    def _is_operator(self, interaction: discord.Interaction) -> bool:
        return interaction.user.id == self.bot.settings.operator_id

    async def _deny(self, interaction: discord.Interaction, action: str) -> None:
        logger.warning(f"Unauthorized {action} attempt: {interaction.user} (ID: {interaction.user.id})")
        await send_followup(interaction, DENIED)

    @app_commands.command(name="unholyadd", description="Adds a word to the monitored list")
    @app_commands.describe(word="The word to be added")
    async def add_word(self, interaction: discord.Interaction, word: str) -> None:
        await interaction.response.defer()
        if not self._is_operator(interaction):
            await self._deny(interaction, "unholyadd")
            return

        try:
            added = await self.bot.trigger_store.add(word)
        except ValueError as e:
            await send_followup(interaction, f"Failed to add word: {e}")
            return
        except DB_ERRORS as e:
            logger.error(f"Failed to add word {word!r}: {type(e).__name__}: {e}")
            await send_followup(interaction, f"Failed to add word: {type(e).__name__}")
            return

        if added:
            await send_followup(interaction, f"Word '{word}' added successfully.")
        else:
            await send_followup(interaction, f"Word '{word}' already exists in the database.")

    @app_commands.command(name="unholyremove", description="Removes a word from the monitored list")
    @app_commands.describe(word="The word to be removed")
    async def remove_word(self, interaction: discord.Interaction, word: str) -> None:
        await interaction.response.defer()
        if not self._is_operator(interaction):
            await self._deny(interaction, "unholyremove")
            return

        try:
            removed = await self.bot.trigger_store.remove(word)
        except DB_ERRORS as e:
            logger.error(f"Failed to remove word {word!r}: {type(e).__name__}: {e}")
            await send_followup(interaction, f"Failed to remove word: {type(e).__name__}")
            return

        if removed:
            await send_followup(interaction, f"Word '{word}' removed successfully.")
        else:
            await send_followup(interaction, f"Word '{word}' does not exist in the database.")

    @app_commands.command(name="words", description="Shows all monitored words")
    async def list_words(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            words = await self.bot.trigger_store.repo.list_all()
        except DB_ERRORS as e:
            logger.error(f"Error fetching words: {type(e).__name__}: {e}")
            await send_followup(interaction, "Error fetching words.")
            return

        if not words:
            await send_followup(interaction, "No words found.")
        else:
            await send_followup(interaction, "Words: " + ", ".join(w.word for w in words))

    @app_commands.command(
        name="deleteallmessages", description="Deletes all stored messages and restarts backtracking"
    )
    async def delete_all_messages(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        if not self._is_operator(interaction):
            await self._deny(interaction, "deleteallmessages")
            return

        # Stop in-flight walks so none writes history back after the purge
        cancelled = await self.bot.pipeline.cancel_backfills()
        if cancelled:
            logger.info(f"Cancelled {cancelled} backfill(s) before purge")

        try:
            removed = await self.bot.messages.purge()
        except DB_ERRORS as e:
            logger.error(f"Failed to purge messages: {type(e).__name__}: {e}")
            await send_followup(interaction, f"Failed to remove messages: {type(e).__name__}")
            return

        try:
            await self.bot.spaces.clear()
        except DB_ERRORS as e:
            logger.error(f"Failed to clear servers: {type(e).__name__}: {e}")
            await send_followup(interaction, f"Failed to remove servers: {type(e).__name__}")
            return
        self.bot.registry.forget_all()

        logger.info(f"Purged {removed} stored messages (by {interaction.user})")
        await send_followup(
            interaction, f"All data from messages has been deleted ({removed} messages)."
        )


async def setup(bot: MonitorBot) -> None:
    await bot.add_cog(Words(bot))
