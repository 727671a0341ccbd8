"""
Per-event delivery pipeline.

:meth:`DeliveryOrchestrator.process` runs one queued event through the relay
steps in order, stopping at the first step that ends it:

1. messages authored by the relay are tracked as "own" and never answered;
2. duplicate create events are ignored;
3. oversized input gets the fixed length warning;
4. untranslatable input is dropped silently;
5. the author's rate-limit budget is consumed (first attempt only);
6. the record is cached and a progress placeholder is shown; a placeholder
   failure asks the queue for a delayed retry until attempts run out;
7. the dialog is built and the language model is called; any failure turns
   the placeholder into the error message;
8. the reply is normalized, then either discarded ("not applicable") or
   written into the placeholder, and every posted chunk is cached as own.

Editing an answered message reuses its earlier reply as the placeholder, and
chunks of the earlier reply that are no longer needed are deleted.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Sequence

from onion_bot.memory.cache.ledger import ReplyLedger
from onion_bot.memory.cache.records import MessageRecord
from onion_bot.memory.cache.store import ReplyChainCache
from onion_bot.response.dialog import ContextBuilder
from onion_bot.response.formatting import is_not_applicable, normalize_reply
from onion_bot.response.renderer import PostedChunk, ProgressPlaceholder, ResponseRenderer

from .errors import GatewayError, PlaceholderError
from .filters import exceeds_input_limit, is_translatable
from .models import InboundEvent, Outcome, QueueItem
from .ports import Gateway, LanguageModel
from .ratelimit import RateLimiter, Verdict

logger = logging.getLogger(__name__)


class DeliveryOrchestrator:
    def __init__(
        self,
        *,
        cache: ReplyChainCache,
        ledger: ReplyLedger,
        limiter: RateLimiter,
        builder: ContextBuilder,
        renderer: ResponseRenderer,
        model: LanguageModel,
        gateway: Gateway,
        max_input_length: int = 3000,
        max_retry_attempts: int = 2,
        length_warning: str = "⚠️ The message is too long.",
        not_applicable_keyword: str = "not translatable",
        edit_reuse: bool = True,
        normalize_output: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache
        self.ledger = ledger
        self.limiter = limiter
        self.builder = builder
        self.renderer = renderer
        self.model = model
        self.gateway = gateway
        self.max_input_length = max_input_length
        self.max_retry_attempts = max_retry_attempts
        self.length_warning = length_warning
        self.not_applicable_keyword = not_applicable_keyword
        self.edit_reuse = edit_reuse
        self.normalize_output = normalize_output
        self._clock = clock

    async def process(self, item: QueueItem) -> Outcome:
        event = item.event
        first_attempt = item.retry_count == 0

        # 1. own messages
        identity = self.gateway.bot_identity()
        if identity is not None and event.author_id == identity.id:
            if self.ledger.was_discarded(event.id):
                logger.debug("Own message %s was already deleted", event.id)
                return Outcome.SKIPPED
            self.cache.mark_own(event.id)
            if not self.cache.has(event.id):
                self.cache.put(event.to_record(own=True))
            return Outcome.TRACKED

        if event.author_is_bot:
            logger.debug("Ignoring message %s from another bot", event.id)
            return Outcome.SKIPPED

        # 2. duplicates
        if first_attempt:
            if not event.is_edit and self.ledger.was_processed(event.id):
                logger.debug("Message %s already processed", event.id)
                return Outcome.SKIPPED
            self.ledger.mark_processed(event.id)

        # 3. length
        if exceeds_input_limit(event.text, self.max_input_length):
            logger.info(
                "Message %s rejected: %d chars (limit %d)",
                event.id,
                len(event.text),
                self.max_input_length,
            )
            await self._send_length_warning(event)
            return Outcome.REJECTED

        # 4. translatability
        if not is_translatable(event.text):
            logger.debug("Message %s is not translatable", event.id)
            return Outcome.REJECTED

        # 5. rate limit
        if first_attempt and self.limiter.consume(event.author_id) is Verdict.DENIED:
            logger.info("Rate limited author %s (message %s)", event.author_id, event.id)
            return Outcome.RATE_LIMITED

        # 6. cache + placeholder
        record = event.to_record()
        self.cache.put(record)

        previous = self.ledger.replies_for(event.id) if event.is_edit and self.edit_reuse else ()
        reuse_id = previous[0] if previous else None

        try:
            placeholder = await self.renderer.start(record, reuse_message_id=reuse_id)
        except PlaceholderError as exc:
            if item.retry_count < self.max_retry_attempts:
                logger.warning(
                    "Placeholder for message %s failed (attempt %d/%d): %s",
                    event.id,
                    item.retry_count + 1,
                    self.max_retry_attempts + 1,
                    exc,
                )
                return Outcome.RETRY
            logger.warning(
                "Dropping message %s after %d attempts: %s", event.id, item.retry_count + 1, exc
            )
            return Outcome.DROPPED

        self.cache.mark_own(placeholder.message_id)
        stale = [rid for rid in previous if rid != placeholder.message_id]

        try:
            return await self._respond(event, placeholder, stale)
        finally:
            await self.renderer.stop(placeholder)

    # ------------------------------------------------------------------ #
    # Generation and delivery
    # ------------------------------------------------------------------ #

    async def _respond(
        self, event: InboundEvent, placeholder: ProgressPlaceholder, stale: Sequence[int]
    ) -> Outcome:
        # 7. dialog + generation
        try:
            dialog = await self.builder.build_dialog(event.id, event.channel_id)
            text = await self.model.generate(dialog[:-1], dialog[-1])
        except Exception:
            logger.exception("Generation failed for message %s", event.id)
            await self.renderer.fail(placeholder)
            self._track_posted(
                event.channel_id,
                [PostedChunk(placeholder.message_id, self.renderer.error_message, placeholder.reply_to)],
            )
            self.ledger.record_replies(event.id, [placeholder.message_id])
            await self._delete_replies(event.channel_id, stale)
            return Outcome.FAILED

        # 8. finalize
        if self.normalize_output:
            text = normalize_reply(text)

        if is_not_applicable(text, self.not_applicable_keyword):
            logger.info("Message %s needs no reply", event.id)
            if await self.renderer.discard(placeholder):
                self.cache.remove(placeholder.message_id)
                self.ledger.mark_discarded(placeholder.message_id)
            self.ledger.forget_replies(event.id)
            await self._delete_replies(event.channel_id, stale)
            return Outcome.NOT_APPLICABLE

        posted = await self.renderer.finish(placeholder, text)
        self._track_posted(event.channel_id, posted)
        self.ledger.record_replies(event.id, [chunk.message_id for chunk in posted])
        await self._delete_replies(event.channel_id, stale)

        if not posted:
            return Outcome.FAILED

        logger.info("Replied to message %s with %d message(s)", event.id, len(posted))
        return Outcome.DELIVERED

    def _track_posted(self, channel_id: int, posted: Iterable[PostedChunk]) -> None:
        identity = self.gateway.bot_identity()
        now = self._clock()
        for chunk in posted:
            self.cache.put(
                MessageRecord(
                    id=chunk.message_id,
                    channel_id=channel_id,
                    author_id=identity.id if identity else 0,
                    author_name=identity.name if identity else "",
                    text=chunk.text,
                    created_at=now,
                    referenced_message_id=chunk.reply_to,
                    is_own_reply=True,
                )
            )

    async def _delete_replies(self, channel_id: int, reply_ids: Iterable[int]) -> None:
        for reply_id in reply_ids:
            try:
                await self.gateway.delete_message(channel_id, reply_id)
            except GatewayError as exc:
                logger.warning("Failed to delete stale reply %s: %s", reply_id, exc)
            self.cache.remove(reply_id)
            self.ledger.mark_discarded(reply_id)

    async def _send_length_warning(self, event: InboundEvent) -> None:
        try:
            await self.gateway.reply_to_message(event.channel_id, event.id, self.length_warning)
        except GatewayError as exc:
            logger.warning("Failed to send length warning for %s: %s", event.id, exc)


__all__ = ["DeliveryOrchestrator"]
