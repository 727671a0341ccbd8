"""
Processed-message ledger.

Remembers which inbound messages were already handled and which reply
messages answered them. The orchestrator uses it to ignore duplicate create
events and to reuse an earlier reply when the source message is edited.
Entries are kept in LRU order and bounded by ``capacity``.

It also keeps a short list of relay messages deleted on purpose, so their
late create events are not cached again.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Tuple


class ReplyLedger:
    def __init__(self, capacity: int = 5000, *, discarded_capacity: int = 256) -> None:
        if capacity < 1 or discarded_capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self.discarded_capacity = discarded_capacity
        self._entries: OrderedDict[int, Tuple[int, ...]] = OrderedDict()
        self._discarded: OrderedDict[int, None] = OrderedDict()

    def was_processed(self, message_id: int) -> bool:
        return message_id in self._entries

    def mark_processed(self, message_id: int) -> None:
        if message_id in self._entries:
            self._entries.move_to_end(message_id)
            return
        self._set(message_id, ())

    def replies_for(self, message_id: int) -> Tuple[int, ...]:
        return self._entries.get(message_id, ())

    def record_replies(self, message_id: int, reply_ids: Iterable[int]) -> None:
        self._set(message_id, tuple(reply_ids))

    def forget_replies(self, message_id: int) -> None:
        if message_id in self._entries:
            self._entries[message_id] = ()

    def mark_discarded(self, message_id: int) -> None:
        """Remember a relay message that was deleted after posting."""

        self._discarded[message_id] = None
        self._discarded.move_to_end(message_id)
        while len(self._discarded) > self.discarded_capacity:
            self._discarded.popitem(last=False)

    def was_discarded(self, message_id: int) -> bool:
        return message_id in self._discarded

    def _set(self, message_id: int, replies: Tuple[int, ...]) -> None:
        self._entries[message_id] = replies
        self._entries.move_to_end(message_id)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ReplyLedger"]
