"""Assemble the conversation for a message by walking its reply chain."""

from __future__ import annotations

import logging
from typing import List

from onion_bot.memory.cache.records import MessageRecord
from onion_bot.memory.cache.store import ReplyChainCache
from onion_bot.relay.errors import GatewayError
from onion_bot.relay.models import DialogTurn, Role
from onion_bot.relay.ports import Gateway

from .formatting import rewrite_mentions

logger = logging.getLogger(__name__)


class ContextBuilder:
    """Build the ordered dialog ending at a leaf message.

    The walk follows ``referenced_message_id`` from the leaf towards the root,
    reading the cache first and falling back to the gateway on a miss (the
    fetched record is cached). It ends at a root, at an unresolvable
    reference, at ``max_chain_length`` turns, or when an id repeats. With
    ``chain_walking`` off only the leaf is submitted.
    """

    def __init__(
        self,
        cache: ReplyChainCache,
        gateway: Gateway,
        *,
        instruction: str,
        instruction_role: Role = "system",
        chain_walking: bool = True,
        max_chain_length: int = 100,
    ) -> None:
        self.cache = cache
        self.gateway = gateway
        self.instruction = instruction
        self.instruction_role = instruction_role
        self.chain_walking = chain_walking
        self.max_chain_length = max_chain_length

    def instruction_turn(self) -> DialogTurn:
        return DialogTurn(role=self.instruction_role, text=self.instruction)

    async def build_dialog(self, leaf_message_id: int, channel_id: int) -> List[DialogTurn]:
        """Return turns oldest-first with the instruction turn appended last."""

        records = await self._walk(leaf_message_id, channel_id)
        turns = [self._to_turn(record) for record in reversed(records)]
        # a message that was only a mention of the bot rewrites to nothing
        turns = [turn for turn in turns if turn.text.strip()]
        turns.append(self.instruction_turn())
        return turns

    async def _walk(self, leaf_message_id: int, channel_id: int) -> List[MessageRecord]:
        limit = self.max_chain_length if self.chain_walking else 1
        visited: set[int] = set()
        records: List[MessageRecord] = []
        current: int | None = leaf_message_id

        while current is not None and len(records) < limit:
            if current in visited:
                logger.warning("Reply chain cycle detected at message %s", current)
                break
            visited.add(current)

            record = await self._resolve(current, channel_id)
            if record is None:
                logger.debug("Reply chain dead end at message %s", current)
                break

            records.append(record)
            current = record.referenced_message_id

        return records

    async def _resolve(self, message_id: int, channel_id: int) -> MessageRecord | None:
        record = self.cache.get(message_id)
        if record is not None:
            return record

        try:
            record = await self.gateway.fetch_message(channel_id, message_id)
        except GatewayError as exc:
            logger.info("Could not fetch message %s: %s", message_id, exc)
            return None
        if record is None:
            return None

        self.cache.put(record)
        # put() may flag the record as own.
        return self.cache.peek(message_id) or record

    def _to_turn(self, record: MessageRecord) -> DialogTurn:
        identity = self.gateway.bot_identity()
        if record.is_own_reply:
            name = identity.name if identity else record.author_name
            return DialogTurn(role="assistant", text=record.text, speaker_name=name)

        text = rewrite_mentions(
            record.text,
            self_id=identity.id if identity else None,
            resolve_name=self.cache.author_name,
        )
        return DialogTurn(role="user", text=text, speaker_name=record.author_name)


__all__ = ["ContextBuilder"]
