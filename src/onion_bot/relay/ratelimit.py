"""Per-author rate limiting.

A fixed-window token bucket: every author gets ``points`` messages per
``duration`` seconds. Denied messages are dropped silently by the
orchestrator so spam is never amplified with error replies. All mutation
happens synchronously inside :meth:`RateLimiter.consume`, which never awaits,
so no lock is needed on the cooperative event loop.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

_PRUNE_THRESHOLD = 1024


class Verdict(enum.Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass
class RateLimiterState:
    points_remaining: int
    window_start: float


class RateLimiter:
    def __init__(
        self,
        points: int = 5,
        duration: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if points < 1:
            raise ValueError("points must be >= 1")
        if duration <= 0:
            raise ValueError("duration must be > 0")
        self.points = points
        self.duration = duration
        self._clock = clock
        self._states: dict[int, RateLimiterState] = {}

    def consume(self, author_id: int) -> Verdict:
        """Spend one point for ``author_id`` if the current window allows it."""

        now = self._clock()
        state = self._states.get(author_id)
        if state is None or now - state.window_start >= self.duration:
            if len(self._states) >= _PRUNE_THRESHOLD:
                self.prune(now)
            state = RateLimiterState(points_remaining=self.points, window_start=now)
            self._states[author_id] = state

        if state.points_remaining <= 0:
            logger.debug("Rate limit exceeded for author %s", author_id)
            return Verdict.DENIED

        state.points_remaining -= 1
        return Verdict.ALLOWED

    def state_for(self, author_id: int) -> RateLimiterState | None:
        return self._states.get(author_id)

    def prune(self, now: float | None = None) -> int:
        """Forget authors whose window already elapsed."""

        if now is None:
            now = self._clock()
        stale = [aid for aid, st in self._states.items() if now - st.window_start >= self.duration]
        for aid in stale:
            del self._states[aid]
        return len(stale)


__all__ = ["RateLimiter", "RateLimiterState", "Verdict"]
