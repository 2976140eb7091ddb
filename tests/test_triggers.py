from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from monitor.ingest.triggers import TriggerWordStore
from shared.repositories.trigger_word import TriggerWordRepository


def _store(pool) -> TriggerWordStore:
    return TriggerWordStore(TriggerWordRepository(pool))


def test_reload_replaces_snapshot(db, pool) -> None:
    ids = db.add_words("foo", "bar")
    store = _store(pool)
    assert store.snapshot is None

    assert asyncio.run(store.reload()) is True
    first = store.snapshot
    assert dict(first.words) == ids

    db.add_words("baz")
    asyncio.run(store.reload())
    assert "baz" in store.snapshot.words
    # The old snapshot is untouched by the swap
    assert "baz" not in first.words


def test_reload_failure_keeps_previous_snapshot(db, pool) -> None:
    db.add_words("foo")
    store = _store(pool)
    asyncio.run(store.reload())
    previous = store.snapshot

    db.down = True
    assert asyncio.run(store.reload()) is False
    assert store.snapshot is previous


def test_reload_failure_before_first_load_stays_unready(db, pool) -> None:
    db.down = True
    store = _store(pool)
    assert asyncio.run(store.reload()) is False
    assert store.snapshot is None
    assert not store.ready


def test_malformed_rows_are_skipped(db, pool) -> None:
    db.add_words("foo")
    db.extra_word_rows.append({"word_id": uuid4(), "word": None})
    db.extra_word_rows.append({"word_id": "not-a-uuid", "word": "bar"})
    store = _store(pool)
    asyncio.run(store.reload())
    assert list(store.snapshot.words) == ["foo"]


def test_add_normalizes_and_reloads(db, pool) -> None:
    store = _store(pool)
    asyncio.run(store.reload())

    assert asyncio.run(store.add("  FooBar ")) is True
    assert "foobar" in db.words
    assert "foobar" in store.snapshot.words


def test_add_existing_word_is_a_noop(db, pool) -> None:
    db.add_words("foo")
    store = _store(pool)
    asyncio.run(store.reload())
    before = store.snapshot

    assert asyncio.run(store.add("FOO")) is False
    assert store.snapshot is before
    assert len(db.words) == 1


def test_add_rejects_blank_word(pool) -> None:
    with pytest.raises(ValueError):
        asyncio.run(_store(pool).add("   "))


def test_remove_reports_missing_word(db, pool) -> None:
    store = _store(pool)
    assert asyncio.run(store.remove("ghost")) is False


def test_remove_reloads_snapshot(db, pool) -> None:
    db.add_words("foo", "bar")
    store = _store(pool)
    asyncio.run(store.reload())

    assert asyncio.run(store.remove("Foo")) is True
    assert list(store.snapshot.words) == ["bar"]


def test_add_propagates_database_errors(db, pool) -> None:
    db.down = True
    with pytest.raises(ConnectionRefusedError):
        asyncio.run(_store(pool).add("foo"))
