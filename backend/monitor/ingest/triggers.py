"""In-memory trigger word set backed by the words table."""

from __future__ import annotations

import logging

from shared.database import DB_ERRORS
from shared.models.trigger_word import TriggerSnapshot, normalize_word
from shared.repositories.trigger_word import TriggerWordRepository

logger = logging.getLogger(__name__)


class TriggerWordStore:
    """Owns the trigger snapshot used by every match.

    ``snapshot`` is ``None`` until the first successful reload. A reload
    replaces the reference wholesale, so a caller holding the previous
    snapshot keeps a complete, unchanged view.
    """

    def __init__(self, repo: TriggerWordRepository):
        self.repo = repo
        self._snapshot: TriggerSnapshot | None = None

    @property
    def snapshot(self) -> TriggerSnapshot | None:
        return self._snapshot

    @property
    def ready(self) -> bool:
        return self._snapshot is not None

    async def reload(self) -> bool:
        """Swap in the persisted word set.

        On a database failure the previous snapshot stays in place and
        False is returned.
        """
        try:
            words = await self.repo.list_all()
        except DB_ERRORS as e:
            state = "keeping previous word list" if self.ready else "word list not loaded"
            logger.error(f"Trigger word reload failed ({state}): {type(e).__name__}: {e}")
            return False

        self._snapshot = TriggerSnapshot.from_words(words)
        logger.info(f"Loaded {len(self._snapshot)} trigger words")
        return True

    async def add(self, word: str) -> bool:
        """Add a word. Returns False if it was already monitored."""
        normalized = normalize_word(word)
        if not normalized:
            raise ValueError("Trigger word cannot be empty")

        added = await self.repo.add(normalized)
        if added:
            logger.info(f"Trigger word added: {normalized}")
            await self.reload()
        return added

    async def remove(self, word: str) -> bool:
        """Remove a word. Returns False if it was not monitored."""
        normalized = normalize_word(word)
        if not normalized:
            return False

        removed = await self.repo.remove(normalized)
        if removed:
            logger.info(f"Trigger word removed: {normalized}")
            await self.reload()
        return removed
