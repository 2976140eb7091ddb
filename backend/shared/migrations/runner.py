"""Schema migration runner with a tracking table."""

from __future__ import annotations

import logging
from pathlib import Path

import asyncpg

logger = logging.getLogger(__name__)

VERSIONS_DIR = Path(__file__).resolve().parent / "versions"


class MigrationRunner:
    """Apply numbered SQL files exactly once.

    Files live in ``versions/`` and are named ``NNN_description.sql``; the
    zero-padded prefix defines the order. Applied versions are recorded in
    ``schema_migrations`` in the same transaction as the migration itself.
    """

    TRACKING_TABLE = "schema_migrations"

    def __init__(self, pool: asyncpg.Pool, migrations_dir: Path | None = None) -> None:
        self.pool = pool
        self.migrations_dir = migrations_dir or VERSIONS_DIR

    async def ensure_table(self) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.TRACKING_TABLE} (
                    version    TEXT PRIMARY KEY,
                    applied_at TIMESTAMPTZ DEFAULT NOW()
                )
                """
            )

    async def get_applied(self) -> set[str]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT version FROM {self.TRACKING_TABLE}")  # noqa: S608
            return {row["version"] for row in rows}

    def discover(self) -> list[Path]:
        """SQL files in apply order."""
        return sorted(self.migrations_dir.glob("*.sql"))

    async def run_pending(self) -> list[str]:
        """Apply every migration not yet recorded. Returns the applied versions."""
        await self.ensure_table()
        applied = await self.get_applied()

        newly_applied: list[str] = []
        for sql_path in self.discover():
            version = sql_path.stem
            if version in applied:
                continue
            await self._apply_one(version, sql_path.read_text(encoding="utf-8"))
            newly_applied.append(version)

        if newly_applied:
            logger.info(f"Applied {len(newly_applied)} migration(s): {', '.join(newly_applied)}")
        else:
            logger.info("Database schema is up to date")
        return newly_applied

    async def _apply_one(self, version: str, sql: str) -> None:
        logger.info(f"Applying migration: {version}")
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(sql)
                await conn.execute(
                    f"INSERT INTO {self.TRACKING_TABLE} (version) VALUES ($1)",  # noqa: S608
                    version,
                )
