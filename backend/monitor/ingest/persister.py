"""Atomic storage of flagged messages."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from shared.models.flagged_message import FlaggedMessage
from shared.repositories.flagged_message import FlaggedMessageRepository

ZERO_WIDTH_SPACE = "\u200b"


def defang_mentions(content: str) -> str:
    """Break every @ so stored text cannot ping anyone when shown again."""
    return content.replace("@", "@" + ZERO_WIDTH_SPACE)


class MessagePersister:
    def __init__(self, repo: FlaggedMessageRepository):
        self.repo = repo

    async def persist(
        self,
        author_id: int | str,
        server_id: int | str,
        content: str,
        word_ids: Iterable[UUID],
        timestamp: datetime,
    ) -> int:
        """Store one flagged message with its word ids; returns the new row id.

        Raises ``ValueError`` when *word_ids* is empty. Database errors
        propagate after the transaction has been rolled back.
        """
        ordered = sorted(set(word_ids), key=str)
        if not ordered:
            raise ValueError("persist() requires at least one matched word id")

        message = FlaggedMessage(
            user_id=str(author_id),
            server_id=str(server_id),
            message=defang_mentions(content),
            timestamp=timestamp,
            word_ids=ordered,
        )
        return await self.repo.insert(message)
