"""Shared data models for the monitor service."""

from .flagged_message import FlaggedMessage, UserScore, WordUsage
from .trigger_word import TriggerSnapshot, TriggerWord, normalize_word

__all__ = [
    "FlaggedMessage",
    "TriggerSnapshot",
    "TriggerWord",
    "UserScore",
    "WordUsage",
    "normalize_word",
]
