"""discord.py implementation of the relay gateway port."""

from __future__ import annotations

import logging

import discord

from onion_bot.memory.cache.records import MessageRecord
from onion_bot.relay.errors import GatewayError
from onion_bot.relay.models import BotIdentity, InboundEvent

logger = logging.getLogger(__name__)


def _reference_id(message: discord.Message) -> int | None:
    reference = getattr(message, "reference", None)
    return getattr(reference, "message_id", None) if reference else None


def event_from_message(message: discord.Message, *, is_edit: bool = False) -> InboundEvent:
    """Convert a gateway message into a relay event."""

    author = message.author
    return InboundEvent(
        id=message.id,
        channel_id=message.channel.id,
        author_id=author.id,
        author_name=getattr(author, "display_name", None) or author.name,
        text=message.content or "",
        created_at=message.created_at.timestamp(),
        author_is_bot=bool(author.bot),
        referenced_message_id=_reference_id(message),
        is_edit=is_edit,
    )


def record_from_message(message: discord.Message, *, own_id: int | None) -> MessageRecord:
    event = event_from_message(message)
    return event.to_record(own=own_id is not None and event.author_id == own_id)


class DiscordGateway:
    """Chat-platform calls used by the relay, keyed by channel and message id.

    Expected "gone" outcomes (``NotFound``, ``Forbidden``) are reported as
    ``None``/``False``; every other HTTP failure raises :class:`GatewayError`.
    """

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    def bot_identity(self) -> BotIdentity | None:
        user = self.client.user
        if user is None:
            return None
        return BotIdentity(id=user.id, name=user.name)

    async def _channel(self, channel_id: int):
        channel = self.client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.client.fetch_channel(channel_id)
        except discord.HTTPException as exc:
            raise GatewayError(f"channel {channel_id} unavailable: {exc}") from exc

    async def fetch_message(self, channel_id: int, message_id: int) -> MessageRecord | None:
        channel = await self._channel(channel_id)
        try:
            message = await channel.fetch_message(message_id)
        except (discord.NotFound, discord.Forbidden):
            return None
        except discord.HTTPException as exc:
            raise GatewayError(f"fetch {message_id} failed: {exc}") from exc

        identity = self.bot_identity()
        return record_from_message(message, own_id=identity.id if identity else None)

    async def send_message(self, channel_id: int, text: str) -> int:
        channel = await self._channel(channel_id)
        try:
            sent = await channel.send(text)
        except discord.HTTPException as exc:
            raise GatewayError(f"send to {channel_id} failed: {exc}") from exc
        return sent.id

    async def reply_to_message(self, channel_id: int, message_id: int, text: str) -> int:
        channel = await self._channel(channel_id)
        try:
            sent = await channel.get_partial_message(message_id).reply(text)
        except discord.HTTPException as exc:
            raise GatewayError(f"reply to {message_id} failed: {exc}") from exc
        return sent.id

    async def edit_message(self, channel_id: int, message_id: int, text: str) -> bool:
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).edit(content=text)
        except (discord.NotFound, discord.Forbidden):
            return False
        except discord.HTTPException as exc:
            raise GatewayError(f"edit {message_id} failed: {exc}") from exc
        return True

    async def delete_message(self, channel_id: int, message_id: int) -> bool:
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).delete()
        except (discord.NotFound, discord.Forbidden):
            return False
        except discord.HTTPException as exc:
            raise GatewayError(f"delete {message_id} failed: {exc}") from exc
        return True


__all__ = ["DiscordGateway", "event_from_message", "record_from_message"]
