"""Repository for flagged messages and the reports read from them."""

from __future__ import annotations

import asyncpg

from shared.cache import AsyncTTLCache, cached
from shared.models.flagged_message import FlaggedMessage, UserScore, WordUsage

_report_cache = AsyncTTLCache(maxsize=256, ttl=60)

# Optional guild filter: $n IS NULL selects every guild
_SCOPE = "($%d::text IS NULL OR m.server_id = $%d)"


class FlaggedMessageRepository:
    def __init__(self, pool: asyncpg.Pool, timeout: float | None = None) -> None:
        self.pool = pool
        self.timeout = timeout

    async def insert(self, message: FlaggedMessage) -> int:
        """Write a message and its word associations in one transaction.

        Any failure rolls back both the message row and every association row.
        """
        if not message.word_ids:
            raise ValueError("Refusing to store a message without matched words")

        async with self.pool.acquire(timeout=self.timeout) as conn:
            async with conn.transaction():
                message_id: int = await conn.fetchval(
                    """
                    INSERT INTO messages (user_id, server_id, message, timestamp)
                    VALUES ($1, $2, $3, $4)
                    RETURNING message_id
                    """,
                    message.user_id,
                    message.server_id,
                    message.message,
                    message.timestamp,
                )
                await conn.executemany(
                    "INSERT INTO message_words (message_id, word_id, position) VALUES ($1, $2, $3)",
                    [
                        (message_id, word_id, position)
                        for position, word_id in enumerate(message.word_ids)
                    ],
                )
        message.message_id = message_id
        return message_id

    @cached(
        cache=_report_cache,
        key_func=lambda self, user_id, server_id=None: f"history:{user_id}:{server_id}",
    )
    async def history(self, user_id: str, server_id: str | None = None) -> list[FlaggedMessage]:
        """Flagged messages of one user, oldest first."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            rows = await conn.fetch(
                f"""
                SELECT m.message_id, m.user_id, m.server_id, m.message, m.timestamp,
                       COALESCE(
                           array_agg(mw.word_id ORDER BY mw.position)
                               FILTER (WHERE mw.word_id IS NOT NULL),
                           '{{}}'
                       ) AS word_ids
                FROM messages m
                LEFT JOIN message_words mw ON mw.message_id = m.message_id
                WHERE m.user_id = $1 AND {_SCOPE % (2, 2)}
                GROUP BY m.message_id
                ORDER BY m.timestamp ASC
                """,
                user_id,
                server_id,
            )
            return [
                FlaggedMessage(
                    message_id=row["message_id"],
                    user_id=row["user_id"],
                    server_id=row["server_id"],
                    message=row["message"],
                    timestamp=row["timestamp"],
                    word_ids=list(row["word_ids"]),
                )
                for row in rows
            ]

    @cached(cache=_report_cache, key_func=lambda self, server_id=None: f"scoreboard:{server_id}")
    async def scoreboard(self, server_id: str | None = None) -> list[UserScore]:
        """Flagged message count per user, highest first."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            rows = await conn.fetch(
                f"""
                SELECT m.user_id, COUNT(*) AS message_count
                FROM messages m
                WHERE {_SCOPE % (1, 1)}
                GROUP BY m.user_id
                ORDER BY message_count DESC, m.user_id
                """,
                server_id,
            )
            return [UserScore(**dict(row)) for row in rows]

    @cached(cache=_report_cache, key_func=lambda self, server_id=None: f"word_usage:{server_id}")
    async def word_usage(self, server_id: str | None = None) -> list[WordUsage]:
        """How often each trigger word appears across stored messages."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            rows = await conn.fetch(
                f"""
                SELECT w.word, COUNT(*) AS usage_count
                FROM message_words mw
                JOIN messages m ON m.message_id = mw.message_id
                JOIN words w ON w.word_id = mw.word_id
                WHERE {_SCOPE % (1, 1)}
                GROUP BY w.word
                ORDER BY usage_count DESC, w.word
                """,
                server_id,
            )
            return [WordUsage(**dict(row)) for row in rows]

    async def purge(self) -> int:
        """Delete every stored message. Returns the number of messages removed."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            async with conn.transaction():
                await conn.execute("DELETE FROM message_words")
                result: str = await conn.execute("DELETE FROM messages")
        _report_cache.clear()
        return int(result.split()[-1])

    @staticmethod
    def invalidate_reports() -> None:
        _report_cache.clear()
