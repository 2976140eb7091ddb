"""Repository for the servers table (guilds whose history has been claimed)."""

from __future__ import annotations

import asyncpg


class SpaceRepository:
    def __init__(self, pool: asyncpg.Pool, timeout: float | None = None) -> None:
        self.pool = pool
        self.timeout = timeout

    async def register(self, server_id: str) -> bool:
        """Claim a guild. Returns True only for the caller whose insert created the row.

        The primary key makes this a single compare-and-insert, so two
        concurrent first messages cannot both win.
        """
        async with self.pool.acquire(timeout=self.timeout) as conn:
            result: str = await conn.execute(
                "INSERT INTO servers (server_id) VALUES ($1) ON CONFLICT (server_id) DO NOTHING",
                server_id,
            )
            return result == "INSERT 0 1"

    async def clear(self) -> int:
        """Forget every registered guild. Returns the number of rows removed."""
        async with self.pool.acquire(timeout=self.timeout) as conn:
            result: str = await conn.execute("DELETE FROM servers")
            return int(result.split()[-1])
