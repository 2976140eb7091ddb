from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from shared.models import FlaggedMessage
from shared.repositories import FlaggedMessageRepository

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _seed(db, pool) -> FlaggedMessageRepository:
    """Two guilds: alice flags twice in guild 1, bob once in each guild."""
    ids = db.add_words("foo", "bar")
    repo = FlaggedMessageRepository(pool)
    rows = [
        ("alice", "1", "foo bar", [ids["bar"], ids["foo"]], 2),
        ("bob", "1", "foo", [ids["foo"]], 1),
        ("alice", "1", "more foo", [ids["foo"]], 0),
        ("bob", "2", "bar", [ids["bar"]], 3),
    ]

    async def run():
        for user_id, server_id, text, word_ids, minutes in rows:
            await repo.insert(
                FlaggedMessage(
                    user_id=user_id,
                    server_id=server_id,
                    message=text,
                    timestamp=T0 + timedelta(minutes=minutes),
                    word_ids=word_ids,
                )
            )

    asyncio.run(run())
    return repo


def test_history_is_oldest_first_with_ordered_word_ids(db, pool) -> None:
    repo = _seed(db, pool)
    history = asyncio.run(repo.history("alice"))

    assert [m.message for m in history] == ["more foo", "foo bar"]
    assert history[1].word_ids == [db.words["bar"], db.words["foo"]]


def test_history_respects_guild_scope(db, pool) -> None:
    repo = _seed(db, pool)
    assert [m.server_id for m in asyncio.run(repo.history("bob"))] == ["1", "2"]
    assert [m.message for m in asyncio.run(repo.history("bob", "2"))] == ["bar"]


def test_scoreboard_counts_per_user(db, pool) -> None:
    repo = _seed(db, pool)

    everywhere = asyncio.run(repo.scoreboard())
    assert [(s.user_id, s.message_count) for s in everywhere] == [("alice", 2), ("bob", 2)]

    guild_two = asyncio.run(repo.scoreboard("2"))
    assert [(s.user_id, s.message_count) for s in guild_two] == [("bob", 1)]


def test_word_usage_counts_links(db, pool) -> None:
    repo = _seed(db, pool)

    assert [(u.word, u.usage_count) for u in asyncio.run(repo.word_usage())] == [
        ("foo", 3),
        ("bar", 2),
    ]
    assert [(u.word, u.usage_count) for u in asyncio.run(repo.word_usage("1"))] == [
        ("foo", 3),
        ("bar", 1),
    ]


def test_reports_are_served_from_cache_until_purge(db, pool) -> None:
    repo = _seed(db, pool)
    before = asyncio.run(repo.scoreboard())

    # Written behind the repository's back; the cached board must not see it
    db.messages.append({**db.messages[0], "message_id": 99, "user_id": "carol"})
    assert asyncio.run(repo.scoreboard()) == before

    assert asyncio.run(repo.purge()) == 5
    assert db.messages == []
    assert db.message_words == []
    assert asyncio.run(repo.scoreboard()) == []
    assert asyncio.run(repo.history("alice")) == []


def test_purge_of_empty_tables_returns_zero(db, pool) -> None:
    assert asyncio.run(FlaggedMessageRepository(pool).purge()) == 0
