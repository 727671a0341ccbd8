"""Signal-driven graceful shutdown."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Callable, Iterable

from .queue import SequentialQueue

logger = logging.getLogger(__name__)


class ShutdownController:
    """Drain the relay queue once, on the first termination signal.

    ``on_drained`` runs once the item in progress finishes (closing the gateway
    connection, which lets the process exit with status 0). Later signals are
    ignored while the drain is in progress.
    """

    def __init__(
        self,
        queue: SequentialQueue,
        *,
        poll_interval: float = 0.1,
        on_drained: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self.queue = queue
        self.poll_interval = poll_interval
        self.on_drained = on_drained
        self._task: asyncio.Task | None = None

    @property
    def requested(self) -> bool:
        return self._task is not None

    def install(
        self,
        loop: asyncio.AbstractEventLoop,
        signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self.request, sig.name)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handlers unavailable for %s", sig.name)

    def request(self, signame: str = "shutdown request") -> asyncio.Task | None:
        if self._task is not None:
            logger.debug("Ignoring %s, shutdown already in progress", signame)
            return None

        logger.info("Gracefully shutting down from %s", signame)
        self._task = asyncio.get_running_loop().create_task(self._drain(), name="relay-shutdown")
        return self._task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _drain(self) -> None:
        await self.queue.shutdown(self.poll_interval)
        if self.on_drained is not None:
            await self.on_drained()


__all__ = ["ShutdownController"]
