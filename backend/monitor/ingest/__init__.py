"""Message ingestion: trigger matching, persistence, guild registration and backfill."""

from .backfill import BackfillReport, BackfillWalker
from .live import LiveIngestionHandler
from .matcher import match
from .persister import MessagePersister, defang_mentions
from .pipeline import IngestionPipeline
from .registry import SpaceRegistry, SpaceState
from .triggers import TriggerWordStore

__all__ = [
    "BackfillReport",
    "BackfillWalker",
    "IngestionPipeline",
    "LiveIngestionHandler",
    "MessagePersister",
    "SpaceRegistry",
    "SpaceState",
    "TriggerWordStore",
    "defang_mentions",
    "match",
]
