import logging

import discord

from onion_bot.clients.gateway import event_from_message

from .message_hook import is_watched

logger = logging.getLogger(__name__)


async def handle(client: discord.Client, before: discord.Message, after: discord.Message):
    """Re-submit an edited human message so its reply can be corrected."""

    if after.author.bot or not is_watched(after.channel.id):
        return

    # Embed unfurls and pin changes also fire edit events.
    if before.content == after.content:
        return

    logger.info("Message %s edited, re-queueing", after.id)
    client.relay.queue.enqueue(event_from_message(after, is_edit=True))
