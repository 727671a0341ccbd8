import logging

import discord

from onion_bot.config import cache, core
from onion_bot.memory import scheduler

logger = logging.getLogger(__name__)

PRESENCE_LIMIT = 50


def presence_text() -> str:
    return f"{core.GPT_MODEL}. {core.GPT_PROMPT}"[:PRESENCE_LIMIT]


async def handle(client: discord.Client):
    """Announce the bot and start background maintenance."""
    logger.info("Logged in as %s (ID: %s)", client.user.name, client.user.id)

    if core.CHANNEL_IDS:
        logger.info("Watching channel IDs: %s", core.CHANNEL_IDS)
    else:
        logger.info("Watching every channel the bot can read")

    try:
        await client.change_presence(activity=discord.CustomActivity(name=presence_text()))
    except discord.HTTPException as exc:
        logger.warning("Failed to set presence: %s", exc)

    await scheduler.start(client.relay.sweeper, cache.SWEEP_INTERVAL)
