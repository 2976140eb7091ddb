"""Tracks which guilds have had their history claimed for backfill."""

from __future__ import annotations

import enum
import logging

from shared.repositories.space import SpaceRepository

logger = logging.getLogger(__name__)


class SpaceState(enum.Enum):
    UNKNOWN = "unknown"
    REGISTERING = "registering"
    KNOWN = "known"


class SpaceRegistry:
    """Guild registration, backed by the servers table.

    ``claim()`` is the only way out of UNKNOWN. A guild in REGISTERING is
    already treated as known by live ingestion, so messages arriving during
    a backfill are stored individually.
    """

    def __init__(self, repo: SpaceRepository):
        self.repo = repo
        self._states: dict[str, SpaceState] = {}

    def state(self, server_id: int | str) -> SpaceState:
        return self._states.get(str(server_id), SpaceState.UNKNOWN)

    def is_known(self, server_id: int | str) -> bool:
        return self.state(server_id) is not SpaceState.UNKNOWN

    async def claim(self, server_id: int | str) -> bool:
        """Register a guild. True means this caller must launch the backfill.

        Database errors propagate; the guild then stays UNKNOWN and the next
        message retries the claim.
        """
        key = str(server_id)
        if self.is_known(key):
            return False

        created = await self.repo.register(key)
        if created:
            self._states[key] = SpaceState.REGISTERING
            logger.info(f"New guild registered: {key}")
        else:
            self._states.setdefault(key, SpaceState.KNOWN)
        return created

    def mark_known(self, server_id: int | str) -> None:
        """Finish a registration. Guilds forgotten mid-backfill stay UNKNOWN."""
        key = str(server_id)
        if self._states.get(key) is SpaceState.REGISTERING:
            self._states[key] = SpaceState.KNOWN

    def forget_all(self) -> None:
        """Drop in-memory state after the servers table has been cleared."""
        self._states.clear()
