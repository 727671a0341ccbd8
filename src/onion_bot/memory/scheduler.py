"""Schedule the periodic retention sweep."""

from __future__ import annotations

import asyncio
import logging

from onion_bot.maintenance import startup as _startup, shutdown as _shutdown

from .cache.sweeper import RetentionSweeper

logger = logging.getLogger(__name__)

_sweep_task: asyncio.Task | None = None


async def start(sweeper: RetentionSweeper, interval: float = 3600) -> asyncio.Task:
    """Schedule ``sweeper`` every ``interval`` seconds.

    Repeated calls (for example on gateway reconnects) keep the existing task.
    """
    global _sweep_task

    if not _sweep_task or _sweep_task.done():
        logger.info("Starting retention sweeper (interval=%ds)", interval)
        _sweep_task = await _startup(sweeper.run_cycle, interval, name="retention-sweep")

    return _sweep_task


async def stop() -> None:
    """Cancel the scheduled sweep if running."""
    global _sweep_task

    if _sweep_task:
        await _shutdown(_sweep_task)
        _sweep_task = None
