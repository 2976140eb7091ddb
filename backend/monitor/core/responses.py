"""Follow-up helpers for deferred slash command interactions."""

import logging

import discord

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split *text* into chunks Discord accepts, preferring line breaks."""
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


async def send_followup(interaction: discord.Interaction, text: str, *, ephemeral: bool = False) -> None:
    """Send *text* as one or more follow-ups of an already deferred interaction."""
    try:
        for chunk in split_message(text):
            await interaction.followup.send(
                chunk,
                ephemeral=ephemeral,
                allowed_mentions=discord.AllowedMentions.none(),
            )
    except discord.HTTPException as e:
        logger.error(f"Error sending follow-up message: {e}")
