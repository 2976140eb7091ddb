from __future__ import annotations

import asyncio

from monitor.core.notifier import MAX_MESSAGE_LENGTH, OperatorNotifier


class DMUser:
    def __init__(self) -> None:
        self.received: list[str] = []

    async def send(self, text: str) -> None:
        self.received.append(text)


class Client:
    def __init__(self, user: DMUser) -> None:
        self.user = user
        self.fetches = 0

    def get_user(self, user_id: int):
        return None

    async def fetch_user(self, user_id: int) -> DMUser:
        self.fetches += 1
        return self.user


def test_operator_is_resolved_once_and_messages_truncated() -> None:
    operator = DMUser()
    client = Client(operator)
    notifier = OperatorNotifier(client, operator_id=42)

    async def run():
        await notifier.send("hello")
        await notifier.send("x" * (MAX_MESSAGE_LENGTH + 50))

    asyncio.run(run())

    assert client.fetches == 1
    assert operator.received[0] == "hello"
    assert len(operator.received[1]) == MAX_MESSAGE_LENGTH
