"""Message records held by the reply-chain cache."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class MessageRecord:
    """One inbound or bot-authored message known to the relay.

    ``referenced_message_id`` points at the message this one replies to. The
    target may be absent from the cache (evicted or never observed); walkers
    treat that as a dead end.
    """

    id: int
    channel_id: int
    author_id: int
    author_name: str
    text: str
    created_at: float
    referenced_message_id: int | None = None
    is_own_reply: bool = False

    @property
    def is_root(self) -> bool:
        return self.referenced_message_id is None

    def as_own(self) -> "MessageRecord":
        return self if self.is_own_reply else replace(self, is_own_reply=True)


__all__ = ["MessageRecord"]
