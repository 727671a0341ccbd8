"""
Single-consumer work queue.

Every inbound event goes through one worker task so replies are generated and
posted in arrival order. The handler reports an :class:`Outcome`; a
``RETRY`` outcome is re-enqueued after ``retry_delay`` seconds from a
separate timer task, so the worker keeps draining in the meantime.

Shutdown only waits for the item currently being handled; events still
waiting in the queue are abandoned and counted in a warning.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .models import InboundEvent, Outcome, QueueItem

logger = logging.getLogger(__name__)

Handler = Callable[[QueueItem], Awaitable[Outcome]]


class SequentialQueue:
    def __init__(self, handler: Handler, *, retry_delay: float = 5.0) -> None:
        self._handler = handler
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue[QueueItem] = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self._retries: set[asyncio.Task] = set()
        self._accepting = True
        self._in_flight = 0

    @property
    def accepting(self) -> bool:
        return self._accepting

    @property
    def in_flight(self) -> int:
        """Items the handler is working on right now (0 or 1)."""

        return self._in_flight

    @property
    def pending(self) -> int:
        """Items queued but not yet picked up by the worker."""

        return self._queue.qsize()

    def start(self) -> None:
        if self._worker and not self._worker.done():
            return
        self._worker = asyncio.create_task(self._run(), name="relay-worker")

    def enqueue(self, event: InboundEvent) -> bool:
        """Queue ``event`` for processing; ``False`` once shutdown has begun."""

        if not self._accepting:
            logger.debug("Shutting down, ignoring message %s", event.id)
            return False
        self._submit(QueueItem(event))
        return True

    def schedule_retry(self, item: QueueItem, delay: float | None = None) -> None:
        """Re-enqueue ``item`` after ``delay`` seconds without blocking."""

        if not self._accepting:
            logger.warning("Shutting down, not retrying message %s", item.event.id)
            return

        task = asyncio.create_task(
            self._delayed_submit(item, self.retry_delay if delay is None else delay),
            name=f"relay-retry-{item.event.id}",
        )
        self._retries.add(task)
        task.add_done_callback(self._retries.discard)

    async def _delayed_submit(self, item: QueueItem, delay: float) -> None:
        await asyncio.sleep(delay)
        if self._accepting:
            self._submit(item)

    def _submit(self, item: QueueItem) -> None:
        self._queue.put_nowait(item)

    async def _run(self) -> None:
        while self._accepting:
            item = await self._queue.get()
            if not self._accepting:
                # picked up after shutdown began; counted as abandoned
                self._queue.put_nowait(item)
                self._queue.task_done()
                break

            self._in_flight += 1
            try:
                outcome = await self._handler(item)
            except Exception:
                logger.exception("Unhandled error while processing message %s", item.event.id)
            else:
                if outcome is Outcome.RETRY:
                    self.schedule_retry(item.next_attempt())
            finally:
                self._in_flight -= 1
                self._queue.task_done()

    async def shutdown(self, poll_interval: float = 0.1) -> None:
        """Stop accepting events, finish the current item, then stop the worker."""

        self._accepting = False

        for task in list(self._retries):
            task.cancel()
        if self._retries:
            await asyncio.gather(*self._retries, return_exceptions=True)

        worker = self._worker
        if self._in_flight:
            logger.info("Waiting for the message in progress to finish")
        while self._in_flight > 0 and worker is not None and not worker.done():
            await asyncio.sleep(poll_interval)

        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

        abandoned = self._queue.qsize()
        if abandoned:
            logger.warning("Abandoned %d queued message(s) at shutdown", abandoned)
        logger.info("Relay queue stopped")


__all__ = ["SequentialQueue", "Handler"]
