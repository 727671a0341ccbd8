import asyncio

import pytest

from onion_bot import maintenance
from onion_bot.memory import scheduler


@pytest.mark.asyncio
async def test_startup_keeps_running_after_failures():
    runs = []

    async def cycle():
        runs.append(len(runs))
        if len(runs) == 1:
            raise RuntimeError("first cycle fails")

    task = await maintenance.startup(cycle, 0.01, name="test-cycle")
    while len(runs) < 3:
        await asyncio.sleep(0.01)
    await maintenance.shutdown(task)

    assert task.cancelled()
    await maintenance.shutdown(None)


class _Sweeper:
    def __init__(self):
        self.cycles = 0

    async def run_cycle(self):
        self.cycles += 1


@pytest.mark.asyncio
async def test_scheduler_start_is_idempotent():
    sweeper = _Sweeper()

    first = await scheduler.start(sweeper, 0.01)
    second = await scheduler.start(sweeper, 0.01)
    assert first is second

    while sweeper.cycles == 0:
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert first.cancelled()
    assert scheduler._sweep_task is None
