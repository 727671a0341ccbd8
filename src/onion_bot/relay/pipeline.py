"""Assemble relay components from configuration."""

from __future__ import annotations

import logging

from onion_bot.config import cache as cache_cfg
from onion_bot.config import core
from onion_bot.config import relay as relay_cfg
from onion_bot.memory.cache import ReplyChainCache, ReplyLedger, RetentionSweeper
from onion_bot.response.dialog import ContextBuilder
from onion_bot.response.renderer import ResponseRenderer

from .orchestrator import DeliveryOrchestrator
from .ports import Gateway, LanguageModel
from .queue import SequentialQueue
from .ratelimit import RateLimiter

logger = logging.getLogger(__name__)


class RelayPipeline:
    """Owns every stateful relay component for one bot instance."""

    def __init__(
        self,
        *,
        cache: ReplyChainCache,
        ledger: ReplyLedger,
        orchestrator: DeliveryOrchestrator,
        queue: SequentialQueue,
        sweeper: RetentionSweeper,
    ) -> None:
        self.cache = cache
        self.ledger = ledger
        self.orchestrator = orchestrator
        self.queue = queue
        self.sweeper = sweeper

    @classmethod
    def from_config(cls, gateway: Gateway, model: LanguageModel) -> "RelayPipeline":
        cache = ReplyChainCache(cache_cfg.CACHE_LENGTH)
        ledger = ReplyLedger(cache_cfg.LEDGER_LENGTH)
        limiter = RateLimiter(relay_cfg.RATE_LIMIT_POINTS, relay_cfg.RATE_LIMIT_DURATION)
        builder = ContextBuilder(
            cache,
            gateway,
            instruction=core.GPT_PROMPT,
            instruction_role=core.GPT_SYSTEM_ROLE,
            chain_walking=relay_cfg.CHAIN_WALKING,
            max_chain_length=relay_cfg.MAX_CHAIN_LENGTH,
        )
        renderer = ResponseRenderer(
            gateway,
            loading_label=relay_cfg.LOADING_LABEL,
            error_message=relay_cfg.ERROR_MESSAGE,
            interval=relay_cfg.LOADING_INTERVAL,
            max_duration=relay_cfg.MAX_LOADING_DURATION,
            chunk_limit=relay_cfg.MAX_CHUNK_LENGTH,
        )
        orchestrator = DeliveryOrchestrator(
            cache=cache,
            ledger=ledger,
            limiter=limiter,
            builder=builder,
            renderer=renderer,
            model=model,
            gateway=gateway,
            max_input_length=relay_cfg.MAX_INPUT_LENGTH,
            max_retry_attempts=relay_cfg.MAX_RETRY_ATTEMPTS,
            length_warning=relay_cfg.LENGTH_WARNING_MESSAGE,
            not_applicable_keyword=relay_cfg.NOT_APPLICABLE_KEYWORD,
            edit_reuse=relay_cfg.EDIT_REUSE,
            normalize_output=relay_cfg.NORMALIZE_OUTPUT,
        )
        queue = SequentialQueue(orchestrator.process, retry_delay=relay_cfg.RETRY_DELAY)
        sweeper = RetentionSweeper(
            cache,
            useful_lifetime=cache_cfg.USEFUL_LIFETIME,
            transient_lifetime=cache_cfg.TRANSIENT_LIFETIME,
            max_chain_length=relay_cfg.MAX_CHAIN_LENGTH,
        )
        return cls(
            cache=cache, ledger=ledger, orchestrator=orchestrator, queue=queue, sweeper=sweeper
        )

    def start(self) -> None:
        self.queue.start()
        logger.info("Relay started")

    async def stop(self, poll_interval: float | None = None) -> None:
        if poll_interval is None:
            poll_interval = relay_cfg.SHUTDOWN_POLL_INTERVAL
        await self.queue.shutdown(poll_interval)


__all__ = ["RelayPipeline"]
