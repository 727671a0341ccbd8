"""Discord bot bootstrap utilities."""

from __future__ import annotations

import asyncio
import logging

import discord

from onion_bot.clients.gateway import DiscordGateway
from onion_bot.config import core, relay as relay_cfg
from onion_bot.event_hooks import edit_hook, message_hook, ready_hook
from onion_bot.memory import scheduler
from onion_bot.relay.pipeline import RelayPipeline
from onion_bot.relay.shutdown import ShutdownController
from onion_bot.response.generation import LanguageModelClient

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.message_content = True


class OnionBot(discord.Client):
    """Discord client that relays channel messages through the language model."""

    def __init__(self) -> None:
        super().__init__(intents=intents)
        self.gateway = DiscordGateway(self)
        self.relay = RelayPipeline.from_config(self.gateway, LanguageModelClient())
        self.shutdown_controller = ShutdownController(
            self.relay.queue,
            poll_interval=relay_cfg.SHUTDOWN_POLL_INTERVAL,
            on_drained=self.close,
        )

    async def setup_hook(self) -> None:
        """Start the relay worker and install signal handlers."""

        self.relay.start()
        self.shutdown_controller.install(asyncio.get_running_loop())

    async def close(self) -> None:
        await scheduler.stop()
        if self.relay.queue.accepting:
            await self.relay.stop()
        await super().close()


bot = OnionBot()


@bot.event
async def on_ready() -> None:
    await ready_hook.handle(bot)


@bot.event
async def on_message(message: discord.Message) -> None:
    await message_hook.handle(bot, message)


@bot.event
async def on_message_edit(before: discord.Message, after: discord.Message) -> None:
    await edit_hook.handle(bot, before, after)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_BOT_TOKEN:
        logger.error("No DISCORD_BOT_TOKEN configured. Cannot run client.")
        return

    try:
        # Keep the root logging format configured by onion_bot.config.
        bot.run(core.DISCORD_BOT_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)


if __name__ == "__main__":
    run()
