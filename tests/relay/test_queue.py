import asyncio
import signal

import pytest

from onion_bot.relay.models import Outcome
from onion_bot.relay.queue import SequentialQueue
from onion_bot.relay.shutdown import ShutdownController


async def _wait_for(predicate, timeout=1.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_items_are_processed_in_arrival_order(make_event):
    seen = []

    async def handler(item):
        await asyncio.sleep(0.01 if item.event.id == 1 else 0)
        seen.append(item.event.id)
        return Outcome.DELIVERED

    queue = SequentialQueue(handler)
    queue.start()
    for _ in range(3):
        assert queue.enqueue(make_event())

    await _wait_for(lambda: len(seen) == 3)
    await queue.shutdown(poll_interval=0.005)

    assert seen == [1, 2, 3]
    assert queue.in_flight == 0
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_retry_is_rescheduled_without_blocking(make_event):
    attempts = []

    async def handler(item):
        attempts.append((item.event.id, item.retry_count))
        if item.event.id == 1 and item.retry_count == 0:
            return Outcome.RETRY
        return Outcome.DELIVERED

    queue = SequentialQueue(handler, retry_delay=0.02)
    queue.start()
    queue.enqueue(make_event())
    queue.enqueue(make_event())

    await _wait_for(lambda: len(attempts) == 3)

    assert attempts == [(1, 0), (2, 0), (1, 1)]
    await queue.shutdown(poll_interval=0.005)


@pytest.mark.asyncio
async def test_handler_errors_do_not_stop_the_worker(make_event):
    seen = []

    async def handler(item):
        if item.event.id == 1:
            raise RuntimeError("boom")
        seen.append(item.event.id)
        return Outcome.DELIVERED

    queue = SequentialQueue(handler)
    queue.start()
    queue.enqueue(make_event())
    queue.enqueue(make_event())

    await _wait_for(lambda: seen == [2])
    await queue.shutdown(poll_interval=0.005)

    assert seen == [2]


@pytest.mark.asyncio
async def test_shutdown_waits_for_in_flight_item(make_event):
    release = asyncio.Event()
    finished = []

    async def handler(item):
        await release.wait()
        finished.append(item.event.id)
        return Outcome.DELIVERED

    queue = SequentialQueue(handler)
    queue.start()
    queue.enqueue(make_event())
    queue.enqueue(make_event())
    await _wait_for(lambda: queue.in_flight == 1)

    stopping = asyncio.create_task(queue.shutdown(poll_interval=0.005))
    await asyncio.sleep(0.02)
    assert not stopping.done()
    assert not queue.enqueue(make_event())

    release.set()
    await asyncio.wait_for(stopping, 1)

    assert finished == [1]
    assert queue.in_flight == 0
    assert queue.pending == 1


@pytest.mark.asyncio
async def test_shutdown_abandons_queued_backlog(make_event):
    started = []

    async def handler(item):
        started.append(item.event.id)
        await asyncio.sleep(0.05)
        return Outcome.DELIVERED

    queue = SequentialQueue(handler)
    queue.start()
    for _ in range(5):
        queue.enqueue(make_event())
    await asyncio.sleep(0.01)

    await asyncio.wait_for(queue.shutdown(poll_interval=0.005), 1)

    assert started == [1]
    assert queue.pending == 4


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_retries(make_event):
    calls = []

    async def handler(item):
        calls.append(item.retry_count)
        return Outcome.RETRY

    queue = SequentialQueue(handler, retry_delay=60)
    queue.start()
    queue.enqueue(make_event())
    await _wait_for(lambda: calls == [0])

    await asyncio.wait_for(queue.shutdown(poll_interval=0.005), 1)

    assert calls == [0]
    assert queue.in_flight == 0


@pytest.mark.asyncio
async def test_controller_drains_once():
    drained = []

    async def handler(item):
        return Outcome.DELIVERED

    async def on_drained():
        drained.append(True)

    queue = SequentialQueue(handler)
    queue.start()
    controller = ShutdownController(queue, poll_interval=0.005, on_drained=on_drained)

    task = controller.request("SIGINT")
    assert controller.request("SIGTERM") is None
    await task

    assert controller.requested
    assert drained == [True]
    assert not queue.accepting


class _Loop:
    def __init__(self, unsupported=False):
        self.unsupported = unsupported
        self.handlers = {}

    def add_signal_handler(self, sig, callback, *args):
        if self.unsupported:
            raise NotImplementedError
        self.handlers[sig] = (callback, args)


def test_install_registers_signal_handlers():
    controller = ShutdownController(SequentialQueue(lambda item: None))
    loop = _Loop()

    controller.install(loop)

    assert set(loop.handlers) == {signal.SIGINT, signal.SIGTERM}
    assert loop.handlers[signal.SIGINT] == (controller.request, ("SIGINT",))

    controller.install(_Loop(unsupported=True))
