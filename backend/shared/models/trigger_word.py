"""Data models for monitored trigger words."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from uuid import UUID


def normalize_word(word: str) -> str:
    """Canonical stored form of a trigger word."""
    return word.strip().lower()


@dataclass(frozen=True)
class TriggerWord:
    """A row of the ``words`` table."""

    word_id: UUID
    word: str


@dataclass(frozen=True)
class TriggerSnapshot:
    """Immutable view of the trigger set at one point in time.

    The store swaps whole snapshots on reload; a snapshot handed to a
    matcher never changes underneath it.
    """

    words: Mapping[str, UUID] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_words(cls, words: Iterable[TriggerWord]) -> TriggerSnapshot:
        return cls(MappingProxyType({w.word: w.word_id for w in words}))

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[tuple[str, UUID]]:
        return iter(self.words.items())
