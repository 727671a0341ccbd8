"""
Bounded reply-chain cache.

:class:`ReplyChainCache` maps message ids to :class:`MessageRecord` values
with least-recently-used eviction once ``capacity`` is exceeded. It also owns
the set of ids authored by the relay itself ("own" messages) and a small
author-name directory used when rewriting mentions.

Removal never cascades: a record whose parent has been evicted keeps its
``referenced_message_id`` and walkers treat the missing parent as a dead end.
The retention sweeper applies a second, time-based eviction policy on top of
the capacity bound.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Iterator, List

from .records import MessageRecord

logger = logging.getLogger(__name__)


class ReplyChainCache:
    """LRU store of message records plus the own-message set."""

    def __init__(self, capacity: int = 1000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._records: OrderedDict[int, MessageRecord] = OrderedDict()
        self._own: set[int] = set()
        self._authors: dict[int, str] = {}

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    def put(self, record: MessageRecord) -> None:
        """Insert or replace ``record``, evicting the LRU entry when full."""

        if record.is_own_reply:
            self._own.add(record.id)
        elif record.id in self._own:
            record = record.as_own()

        if record.id in self._records:
            self._records.move_to_end(record.id)
        self._records[record.id] = record
        if record.author_name:
            self._authors[record.author_id] = record.author_name

        while len(self._records) > self.capacity:
            evicted_id, _ = self._records.popitem(last=False)
            self._own.discard(evicted_id)
            logger.debug("Evicted message %s (capacity %d)", evicted_id, self.capacity)

    def remove(self, message_id: int) -> bool:
        """Drop ``message_id``; returns ``False`` when it was not cached."""

        self._own.discard(message_id)
        return self._records.pop(message_id, None) is not None

    def mark_own(self, message_id: int) -> None:
        """Record ``message_id`` as authored by the relay."""

        self._own.add(message_id)
        record = self._records.get(message_id)
        if record is not None and not record.is_own_reply:
            self._records[message_id] = record.as_own()

    def clear(self) -> None:
        self._records.clear()
        self._own.clear()
        self._authors.clear()

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def get(self, message_id: int) -> MessageRecord | None:
        """Return the record for ``message_id`` and refresh its recency."""

        record = self._records.get(message_id)
        if record is not None:
            self._records.move_to_end(message_id)
        return record

    def peek(self, message_id: int) -> MessageRecord | None:
        """Return the record without touching LRU order."""

        return self._records.get(message_id)

    def has(self, message_id: int) -> bool:
        return message_id in self._records

    def all_ids(self) -> List[int]:
        """Return cached ids ordered least -> most recently used."""

        return list(self._records)

    def is_own(self, message_id: int) -> bool:
        return message_id in self._own

    def own_ids(self) -> List[int]:
        return list(self._own)

    def author_name(self, author_id: int) -> str | None:
        return self._authors.get(author_id)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MessageRecord]:
        return iter(list(self._records.values()))


__all__ = ["ReplyChainCache"]
