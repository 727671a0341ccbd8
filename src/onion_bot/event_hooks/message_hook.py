import logging

import discord

from onion_bot.clients.gateway import event_from_message
from onion_bot.config import core

logger = logging.getLogger(__name__)


def is_watched(channel_id: int) -> bool:
    """An empty allow-list watches every channel."""
    return not core.CHANNEL_IDS or channel_id in core.CHANNEL_IDS


async def handle(client: discord.Client, message: discord.Message):
    """Queue a newly created message for the relay."""

    # 1) Ignore channels that are not configured for processing
    if not is_watched(message.channel.id):
        return

    # 2) Own replies are queued too so the relay can track them
    event = event_from_message(message)
    if not client.relay.queue.enqueue(event):
        logger.debug("Relay not accepting, dropped message %s", message.id)
        return

    logger.debug(
        "Queued message %s from %s in channel %s",
        message.id,
        event.author_name,
        message.channel.id,
    )
