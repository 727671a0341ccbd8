"""
Live progress placeholder and final reply delivery.

While a reply is generated the renderer keeps a placeholder message in the
channel and advances a progress bar on it every ``interval`` seconds. The
animation runs as its own task and stops itself after ``max_duration`` even
if generation is still pending. :meth:`ResponseRenderer.progress` wraps the
placeholder lifetime so the animation task is cancelled on every exit path.

Writes made while finalizing (edit, reply, delete) are best-effort: failures
are logged and swallowed, never retried, to avoid duplicate replies.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, NamedTuple, Sequence

from onion_bot.memory.cache.records import MessageRecord
from onion_bot.relay.errors import GatewayError, PlaceholderError
from onion_bot.relay.ports import Gateway

logger = logging.getLogger(__name__)

PROGRESS_STEPS = 10


def build_frames(label: str, steps: int = PROGRESS_STEPS) -> tuple[str, ...]:
    """Return progress-bar frames from empty to full."""

    return tuple(f"{label} {'▓' * i}{'░' * (steps - i)}" for i in range(steps + 1))


def split_for_delivery(text: str, limit: int = 1950) -> List[str]:
    """Split ``text`` into chunks of at most ``limit`` characters.

    Cuts at the last newline inside the window when that keeps at least half
    a chunk, otherwise cuts hard at ``limit``. Blank chunks are dropped.
    """

    if limit < 1:
        raise ValueError("limit must be >= 1")

    chunks: List[str] = []
    remaining = text
    while remaining:
        if len(remaining) <= limit:
            chunk, remaining = remaining, ""
        else:
            cut = remaining.rfind("\n", 0, limit + 1)
            if cut > limit // 2:
                chunk, remaining = remaining[:cut], remaining[cut + 1:]
            else:
                chunk, remaining = remaining[:limit], remaining[limit:]
        if chunk.strip():
            chunks.append(chunk)
    return chunks


@dataclass
class ProgressPlaceholder:
    """The in-progress message that becomes the final reply."""

    message_id: int
    channel_id: int
    reply_to: int
    started_at: float
    frame_index: int = 0
    active: bool = True
    reused: bool = False
    task: asyncio.Task | None = field(default=None, repr=False, compare=False)


class PostedChunk(NamedTuple):
    message_id: int
    text: str
    reply_to: int


class ResponseRenderer:
    def __init__(
        self,
        gateway: Gateway,
        *,
        loading_label: str = "🧅 Translating",
        error_message: str = "❗ Failed to generate a reply. Please try again.",
        interval: float = 0.5,
        max_duration: float = 10.0,
        chunk_limit: int = 1950,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.gateway = gateway
        self.frames: Sequence[str] = build_frames(loading_label)
        self.error_message = error_message
        self.interval = interval
        self.max_duration = max_duration
        self.chunk_limit = chunk_limit
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Placeholder lifecycle
    # ------------------------------------------------------------------ #

    async def start(
        self, original: MessageRecord, *, reuse_message_id: int | None = None
    ) -> ProgressPlaceholder:
        """Post (or reuse) the placeholder and start animating it.

        Raises :class:`PlaceholderError` when no placeholder could be shown.
        """

        first_frame = self.frames[0]
        message_id: int | None = None
        reused = False

        if reuse_message_id is not None:
            try:
                reused = await self.gateway.edit_message(
                    original.channel_id, reuse_message_id, first_frame
                )
            except GatewayError as exc:
                logger.info("Previous reply %s not reusable: %s", reuse_message_id, exc)
            if reused:
                message_id = reuse_message_id

        if message_id is None:
            try:
                message_id = await self.gateway.reply_to_message(
                    original.channel_id, original.id, first_frame
                )
            except GatewayError as exc:
                raise PlaceholderError(
                    f"could not post placeholder for message {original.id}: {exc}"
                ) from exc

        placeholder = ProgressPlaceholder(
            message_id=message_id,
            channel_id=original.channel_id,
            reply_to=original.id,
            started_at=self._clock(),
            reused=reused,
        )
        placeholder.task = asyncio.create_task(
            self._animate(placeholder), name=f"progress-{message_id}"
        )
        return placeholder

    async def update_frame(self, placeholder: ProgressPlaceholder) -> bool:
        """Advance the progress bar; returns ``False`` once it is not editable."""

        placeholder.frame_index += 1
        frame = self.frames[placeholder.frame_index % len(self.frames)]
        try:
            return await self.gateway.edit_message(
                placeholder.channel_id, placeholder.message_id, frame
            )
        except GatewayError as exc:
            logger.debug("Progress frame for %s failed: %s", placeholder.message_id, exc)
            return True

    async def stop(self, placeholder: ProgressPlaceholder) -> None:
        """Stop the animation and wait for its task to finish."""

        placeholder.active = False
        task = placeholder.task
        if task is None or task.done():
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @asynccontextmanager
    async def progress(
        self, original: MessageRecord, *, reuse_message_id: int | None = None
    ) -> AsyncIterator[ProgressPlaceholder]:
        """Scope a placeholder so its animation always stops."""

        placeholder = await self.start(original, reuse_message_id=reuse_message_id)
        try:
            yield placeholder
        finally:
            await self.stop(placeholder)

    async def _animate(self, placeholder: ProgressPlaceholder) -> None:
        try:
            while placeholder.active:
                await asyncio.sleep(self.interval)
                if not placeholder.active:
                    break
                if self._clock() - placeholder.started_at >= self.max_duration:
                    logger.debug("Progress animation for %s timed out", placeholder.message_id)
                    break
                if not await self.update_frame(placeholder):
                    break
        finally:
            placeholder.active = False

    # ------------------------------------------------------------------ #
    # Terminal states
    # ------------------------------------------------------------------ #

    async def finish(self, placeholder: ProgressPlaceholder, final_text: str) -> List[PostedChunk]:
        """Write ``final_text`` into the placeholder, chaining overflow chunks.

        Returns the chunks that actually reached the channel, in order.
        """

        await self.stop(placeholder)
        chunks = split_for_delivery(final_text, self.chunk_limit)
        if not chunks:
            await self.discard(placeholder)
            return []

        posted: List[PostedChunk] = []
        channel_id = placeholder.channel_id
        try:
            edited = await self.gateway.edit_message(channel_id, placeholder.message_id, chunks[0])
        except GatewayError as exc:
            logger.warning("Failed to finalize placeholder %s: %s", placeholder.message_id, exc)
            return posted
        if not edited:
            logger.warning("Placeholder %s is no longer editable", placeholder.message_id)
            return posted
        posted.append(PostedChunk(placeholder.message_id, chunks[0], placeholder.reply_to))

        previous_id = placeholder.message_id
        for chunk in chunks[1:]:
            try:
                new_id = await self.gateway.reply_to_message(channel_id, previous_id, chunk)
            except GatewayError as exc:
                logger.warning(
                    "Failed to post chunk %d/%d after %s: %s",
                    len(posted) + 1,
                    len(chunks),
                    previous_id,
                    exc,
                )
                break
            posted.append(PostedChunk(new_id, chunk, previous_id))
            previous_id = new_id

        return posted

    async def fail(self, placeholder: ProgressPlaceholder, error_text: str | None = None) -> bool:
        """Replace the placeholder with the user-visible error text."""

        await self.stop(placeholder)
        try:
            return await self.gateway.edit_message(
                placeholder.channel_id, placeholder.message_id, error_text or self.error_message
            )
        except GatewayError as exc:
            logger.warning("Failed to show error on placeholder %s: %s", placeholder.message_id, exc)
            return False

    async def discard(self, placeholder: ProgressPlaceholder) -> bool:
        """Delete the placeholder when no reply is needed."""

        await self.stop(placeholder)
        try:
            return await self.gateway.delete_message(placeholder.channel_id, placeholder.message_id)
        except GatewayError as exc:
            logger.warning("Failed to delete placeholder %s: %s", placeholder.message_id, exc)
            return False


__all__ = [
    "ProgressPlaceholder",
    "PostedChunk",
    "ResponseRenderer",
    "build_frames",
    "split_for_delivery",
]
