"""Direct-message status channel to the bot operator."""

import logging

import discord

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


class OperatorNotifier:
    """Sends plain status strings to the operator by DM.

    Delivery failures are logged and swallowed; progress reports must never
    abort the work they describe.
    """

    def __init__(self, client: discord.Client, operator_id: int):
        self.client = client
        self.operator_id = operator_id
        self._user: discord.User | None = None

    async def _resolve(self) -> discord.User:
        if self._user is None:
            self._user = self.client.get_user(self.operator_id) or await self.client.fetch_user(
                self.operator_id
            )
        return self._user

    async def send(self, text: str) -> None:
        try:
            user = await self._resolve()
            await user.send(text[:MAX_MESSAGE_LENGTH])
        except discord.HTTPException as e:
            logger.warning(f"Could not DM operator {self.operator_id}: {e}")
