"""Per-message match and persist path shared by live traffic and backfill."""

from __future__ import annotations

import logging

import discord

from shared.database import DB_ERRORS

from .matcher import match
from .persister import MessagePersister
from .triggers import TriggerWordStore

logger = logging.getLogger(__name__)


class LiveIngestionHandler:
    def __init__(
        self,
        client: discord.Client,
        store: TriggerWordStore,
        persister: MessagePersister,
    ):
        self.client = client
        self.store = store
        self.persister = persister

    def _is_own(self, message: discord.Message) -> bool:
        me = self.client.user
        return me is not None and message.author.id == me.id

    async def handle(self, message: discord.Message, server_id: int | str) -> bool:
        """Store *message* if it contains a trigger word. Returns True if stored.

        Never raises: a failed write is logged and the message is dropped.
        """
        if self._is_own(message):
            return False

        # One snapshot per message; a concurrent reload does not affect it.
        snapshot = self.store.snapshot
        if snapshot is None:
            return False

        word_ids = match(message.content, snapshot)
        if not word_ids:
            return False

        try:
            await self.persister.persist(
                message.author.id,
                server_id,
                message.content,
                word_ids,
                message.created_at,
            )
        except DB_ERRORS as e:
            logger.error(
                f"Dropped flagged message {message.id} in guild {server_id}: "
                f"{type(e).__name__}: {e}"
            )
            return False
        except Exception:
            logger.exception(f"Unexpected error storing message {message.id} in guild {server_id}")
            return False
        return True
