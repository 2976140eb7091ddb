"""Repository for the words table."""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg

from shared.models.trigger_word import TriggerWord

logger = logging.getLogger(__name__)


class TriggerWordRepository:
    def __init__(self, pool: asyncpg.Pool, timeout: float | None = None) -> None:
        self.pool = pool
        self.timeout = timeout

    async def list_all(self) -> list[TriggerWord]:
        """Return every trigger word. Rows that cannot be converted are skipped."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            rows = await conn.fetch("SELECT word_id, word FROM words ORDER BY word")

        words: list[TriggerWord] = []
        for row in rows:
            word_id, word = row["word_id"], row["word"]
            if not isinstance(word_id, UUID) or not isinstance(word, str) or not word:
                logger.warning(f"Skipping malformed words row: {dict(row)!r}")
                continue
            words.append(TriggerWord(word_id=word_id, word=word))
        return words

    async def add(self, word: str) -> bool:
        """Insert a word. Returns False if it already existed."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            result: str = await conn.execute(
                "INSERT INTO words (word) VALUES ($1) ON CONFLICT (word) DO NOTHING",
                word,
            )
            return result == "INSERT 0 1"

    async def remove(self, word: str) -> bool:
        """Delete a word. Returns True if deleted."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            result: str = await conn.execute("DELETE FROM words WHERE word = $1", word)
            return result == "DELETE 1"
