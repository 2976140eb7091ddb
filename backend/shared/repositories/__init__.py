"""Shared repository layer for the monitor service."""

from .flagged_message import FlaggedMessageRepository
from .space import SpaceRepository
from .trigger_word import TriggerWordRepository

__all__ = [
    "FlaggedMessageRepository",
    "SpaceRepository",
    "TriggerWordRepository",
]
