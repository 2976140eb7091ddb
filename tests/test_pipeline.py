from __future__ import annotations

import asyncio

from fakes import (
    BlockingChannel,
    FakeChannel,
    FakeGuild,
    FakeMessage,
    FakeUser,
    build_components,
    make_page,
)

from monitor.ingest.registry import SpaceState
from shared.repositories import SpaceRepository


def _started_count(components) -> int:
    return sum(text.startswith("I've started backtracking") for text in components.notifier.sent)


def test_end_to_end_known_guild(db, pool) -> None:
    ids = db.add_words("foo")
    db.servers.add("1")
    components = build_components(pool)
    guild = FakeGuild(id=1)

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(
            FakeMessage(id=1, content="I love FOOtball", author=FakeUser(id=5), guild=guild)
        )

    asyncio.run(run())

    assert len(db.messages) == 1
    assert db.messages[0]["message"] == "I love FOOtball"
    assert [r["word_id"] for r in db.message_words] == [ids["foo"]]
    assert _started_count(components) == 0


def test_removed_word_stops_matching(db, pool) -> None:
    db.add_words("foo")
    db.servers.add("1")
    components = build_components(pool)
    guild = FakeGuild(id=1)

    async def run():
        await components.store.reload()
        assert await components.store.remove("foo") is True
        await components.pipeline.dispatch(FakeMessage(id=1, content="I love FOOtball", guild=guild))

    asyncio.run(run())
    assert db.messages == []
    assert db.message_words == []


def test_first_message_from_new_guild_launches_backfill(db, pool) -> None:
    db.add_words("foo")
    components = build_components(pool)
    trigger = FakeMessage(id=500, content="foo!")
    guild = FakeGuild(id=2, text_channels=[FakeChannel("general", [[trigger] + make_page(499, 3)])])
    trigger.guild = guild

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(trigger)
        assert components.registry.state(2) is SpaceState.REGISTERING
        await components.pipeline.wait_for_backfills()

    asyncio.run(run())

    # Stored once, by the backfill, not also by the live path
    assert [m["message"] for m in db.messages] == ["foo!"]
    assert db.servers == {"2"}
    assert components.registry.state(2) is SpaceState.KNOWN
    assert _started_count(components) == 1


def test_concurrent_first_messages_launch_one_backfill(db, pool) -> None:
    components = build_components(pool)
    guild = FakeGuild(id=3, text_channels=[FakeChannel("general", [make_page(100, 4)])])

    async def run():
        await components.store.reload()
        messages = [FakeMessage(id=i, content="hi", guild=guild) for i in range(20)]
        await asyncio.gather(*(components.pipeline.dispatch(m) for m in messages))
        await components.pipeline.wait_for_backfills()

    asyncio.run(run())
    assert _started_count(components) == 1


def test_messages_during_backfill_are_handled_live(db, pool) -> None:
    db.add_words("foo")
    components = build_components(pool)
    channel = BlockingChannel()
    guild = FakeGuild(id=4, text_channels=[channel])

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(FakeMessage(id=1, content="hello", guild=guild))
        await channel.started.wait()
        assert components.pipeline.active_backfills == ["4"]

        await components.pipeline.dispatch(FakeMessage(id=2, content="foo live", guild=guild))
        assert [m["message"] for m in db.messages] == ["foo live"]

        channel.release.set()
        await components.pipeline.wait_for_backfills()

    asyncio.run(run())
    assert components.pipeline.active_backfills == []


def test_shutdown_cancels_running_backfill(db, pool) -> None:
    components = build_components(pool)
    channel = BlockingChannel()
    guild = FakeGuild(id=5, text_channels=[channel])

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(FakeMessage(id=1, content="hello", guild=guild))
        await channel.started.wait()
        await components.pipeline.shutdown()
        # Let the done callback run
        await asyncio.sleep(0)

    asyncio.run(run())
    assert components.pipeline.active_backfills == []
    assert components.registry.state(5) is SpaceState.KNOWN
    assert _started_count(components) == 1
    assert not any("has been backtracked" in text for text in components.notifier.sent)


def test_guild_forgotten_mid_backfill_is_backfilled_again(db, pool) -> None:
    components = build_components(pool)
    spaces = SpaceRepository(pool)
    channel = BlockingChannel()
    guild = FakeGuild(id=7, text_channels=[channel])

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(FakeMessage(id=1, content="hello", guild=guild))
        await channel.started.wait()

        await spaces.clear()
        components.registry.forget_all()
        channel.release.set()
        await components.pipeline.wait_for_backfills()
        assert components.registry.state(7) is SpaceState.UNKNOWN

        await components.pipeline.dispatch(FakeMessage(id=2, content="hello again", guild=guild))
        await components.pipeline.wait_for_backfills()

    asyncio.run(run())
    assert _started_count(components) == 2
    assert db.servers == {"7"}
    assert components.registry.state(7) is SpaceState.KNOWN


def test_direct_messages_are_ignored(db, pool) -> None:
    db.add_words("foo")
    components = build_components(pool)

    async def run():
        await components.store.reload()
        await components.pipeline.dispatch(FakeMessage(id=1, content="foo", guild=None))

    asyncio.run(run())
    assert db.servers == set()
    assert db.messages == []


def test_registration_outage_drops_the_message(db, pool, caplog) -> None:
    db.add_words("foo")
    components = build_components(pool)
    asyncio.run(components.store.reload())
    db.down = True

    asyncio.run(components.pipeline.dispatch(FakeMessage(id=1, content="foo", guild=FakeGuild(id=6))))

    assert components.registry.state(6) is SpaceState.UNKNOWN
    assert "Guild registration check failed for 6" in caplog.text
