"""Data models for flagged messages and the reports built on them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass
class FlaggedMessage:
    """A stored message that contained at least one trigger word."""

    user_id: str
    server_id: str
    message: str
    timestamp: datetime
    word_ids: list[UUID] = field(default_factory=list)
    message_id: int | None = None


@dataclass
class UserScore:
    """Scoreboard row: flagged message count for one user."""

    user_id: str
    message_count: int


@dataclass
class WordUsage:
    """How many stored messages referenced one trigger word."""

    word: str
    usage_count: int
