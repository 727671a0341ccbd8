"""
Reachability-aware retention for the reply-chain cache.

Records reachable by walking ``referenced_message_id`` backwards from any of
the relay's own replies form the *useful set* and are kept for
``useful_lifetime`` seconds; everything else is dropped after
``transient_lifetime`` seconds. Walks only consult the cache, stop at
missing records, and carry a visited set so reference cycles terminate.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .store import ReplyChainCache

logger = logging.getLogger(__name__)

DAY = 24 * 3600


class RetentionSweeper:
    def __init__(
        self,
        cache: ReplyChainCache,
        *,
        useful_lifetime: float = 7 * DAY,
        transient_lifetime: float = DAY,
        max_chain_length: int = 100,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache
        self.useful_lifetime = useful_lifetime
        self.transient_lifetime = transient_lifetime
        self.max_chain_length = max_chain_length
        self._clock = clock

    def useful_ids(self) -> set[int]:
        """Return every cached id reachable from an own message."""

        useful: set[int] = set()
        for start_id in self.cache.own_ids():
            visited: set[int] = set()
            current: int | None = start_id
            while current is not None and len(visited) < self.max_chain_length:
                # Shared prefix already marked by an earlier walk.
                if current in useful or current in visited:
                    break
                record = self.cache.peek(current)
                if record is None:
                    break
                visited.add(current)
                current = record.referenced_message_id
            useful |= visited
        return useful

    def sweep(self, now: float | None = None) -> int:
        """Delete expired records and return how many were removed."""

        if now is None:
            now = self._clock()
        useful = self.useful_ids()

        expired = []
        for record in self.cache:
            lifetime = self.useful_lifetime if record.id in useful else self.transient_lifetime
            if now - record.created_at > lifetime:
                expired.append(record.id)

        for message_id in expired:
            self.cache.remove(message_id)
        return len(expired)

    async def run_cycle(self) -> None:
        """One scheduled sweep, logged for operators."""

        before = len(self.cache)
        removed = self.sweep()
        logger.info(
            "Retention sweep removed %d of %d messages (%d cached, %d own)",
            removed,
            before,
            len(self.cache),
            len(self.cache.own_ids()),
        )


__all__ = ["RetentionSweeper"]
