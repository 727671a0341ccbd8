"""
Collaborator contracts consumed by the relay.

The relay never touches ``discord`` or ``openai`` directly. ``Gateway``
describes the chat-platform calls it needs and ``LanguageModel`` the text
generation call; :mod:`onion_bot.clients.gateway` and
:mod:`onion_bot.response.generation` provide the production implementations,
tests provide in-memory fakes. Gateway methods raise
:class:`~onion_bot.relay.errors.GatewayError` on failure, except where a
``bool``/``None`` result expresses the expected "not found" outcome.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from onion_bot.memory.cache.records import MessageRecord

from .models import BotIdentity, DialogTurn


class Gateway(Protocol):
    """Chat-platform calls used by the relay.

    Everything the relay posts is a reply. ``send_message`` (a plain post with
    no reference) is part of the contract so other callers can share an
    implementation, but the relay pipeline itself never calls it.
    """

    def bot_identity(self) -> BotIdentity | None: ...

    async def fetch_message(self, channel_id: int, message_id: int) -> MessageRecord | None: ...

    async def send_message(self, channel_id: int, text: str) -> int: ...

    async def reply_to_message(self, channel_id: int, message_id: int, text: str) -> int: ...

    async def edit_message(self, channel_id: int, message_id: int, text: str) -> bool: ...

    async def delete_message(self, channel_id: int, message_id: int) -> bool: ...


class LanguageModel(Protocol):
    async def generate(self, dialog: Sequence[DialogTurn], instruction: DialogTurn) -> str: ...


__all__ = ["Gateway", "LanguageModel"]
