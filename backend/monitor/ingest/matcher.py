"""Substring matching of message text against a trigger snapshot."""

from __future__ import annotations

from uuid import UUID

from shared.models.trigger_word import TriggerSnapshot


def match(text: str, snapshot: TriggerSnapshot | None) -> frozenset[UUID]:
    """Return the ids of every trigger contained in any whitespace token of *text*.

    Case-insensitive; a trigger only needs to be a substring of a token, so
    "assassin" matches "assassinate". Triggers containing whitespace can
    therefore never match. A ``None`` snapshot means the word list has not
    been loaded yet and always yields an empty result.
    """
    if snapshot is None or not text:
        return frozenset()

    found: set[UUID] = set()
    for token in text.lower().split():
        for word, word_id in snapshot:
            if word in token:
                found.add(word_id)
    return frozenset(found)
