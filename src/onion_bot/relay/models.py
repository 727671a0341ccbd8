"""Value types exchanged between relay components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Literal

from onion_bot.memory.cache.records import MessageRecord

Role = Literal["user", "assistant", "system", "developer"]


@dataclass(frozen=True, slots=True)
class DialogTurn:
    """One entry of the conversation submitted to the language model."""

    role: Role
    text: str
    speaker_name: str | None = None


@dataclass(frozen=True, slots=True)
class BotIdentity:
    """The relay's own platform account."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class InboundEvent:
    """A message create or edit delivered by the gateway."""

    id: int
    channel_id: int
    author_id: int
    author_name: str
    text: str
    created_at: float
    author_is_bot: bool = False
    referenced_message_id: int | None = None
    is_edit: bool = False

    def to_record(self, *, own: bool = False) -> MessageRecord:
        return MessageRecord(
            id=self.id,
            channel_id=self.channel_id,
            author_id=self.author_id,
            author_name=self.author_name,
            text=self.text,
            created_at=self.created_at,
            referenced_message_id=self.referenced_message_id,
            is_own_reply=own,
        )


@dataclass(frozen=True, slots=True)
class QueueItem:
    event: InboundEvent
    retry_count: int = 0

    def next_attempt(self) -> "QueueItem":
        return replace(self, retry_count=self.retry_count + 1)


class Outcome(enum.Enum):
    """Terminal result of processing one queue item."""

    TRACKED = "tracked"
    SKIPPED = "skipped"
    REJECTED = "rejected"
    RATE_LIMITED = "rate_limited"
    RETRY = "retry"
    DROPPED = "dropped"
    FAILED = "failed"
    NOT_APPLICABLE = "not_applicable"
    DELIVERED = "delivered"


__all__ = ["Role", "DialogTurn", "BotIdentity", "InboundEvent", "QueueItem", "Outcome"]
