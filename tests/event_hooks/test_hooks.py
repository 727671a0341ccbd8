import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord

from onion_bot.event_hooks import edit_hook, message_hook, ready_hook


class _Queue:
    def __init__(self, accepting=True):
        self.accepting = accepting
        self.events = []

    def enqueue(self, event):
        if self.accepting:
            self.events.append(event)
        return self.accepting


def _client(queue=None):
    return SimpleNamespace(
        user=SimpleNamespace(id=999, name="OnionBot"),
        relay=SimpleNamespace(queue=queue or _Queue(), sweeper=object()),
        change_presence=AsyncMock(),
    )


def _message(message_id=5, content="hello", *, channel_id=1, bot=False, reply_to=None):
    return SimpleNamespace(
        id=message_id,
        content=content,
        channel=SimpleNamespace(id=channel_id),
        author=SimpleNamespace(id=42, name="alice", display_name="Alice", bot=bot),
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        reference=SimpleNamespace(message_id=reply_to) if reply_to else None,
    )


def test_message_hook_enqueues_event(monkeypatch):
    monkeypatch.setattr(message_hook.core, "CHANNEL_IDS", [])
    client = _client()

    asyncio.run(message_hook.handle(client, _message(reply_to=3)))

    (event,) = client.relay.queue.events
    assert event.id == 5
    assert event.author_name == "Alice"
    assert event.referenced_message_id == 3
    assert not event.is_edit
    assert event.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp()


def test_message_hook_respects_channel_allow_list(monkeypatch):
    monkeypatch.setattr(message_hook.core, "CHANNEL_IDS", [2])
    client = _client()

    asyncio.run(message_hook.handle(client, _message(channel_id=1)))
    asyncio.run(message_hook.handle(client, _message(channel_id=2)))

    assert [event.channel_id for event in client.relay.queue.events] == [2]


def test_message_hook_when_not_accepting(monkeypatch):
    monkeypatch.setattr(message_hook.core, "CHANNEL_IDS", [])
    client = _client(_Queue(accepting=False))

    asyncio.run(message_hook.handle(client, _message()))

    assert client.relay.queue.events == []


def test_edit_hook_requeues_changed_human_messages(monkeypatch):
    monkeypatch.setattr(message_hook.core, "CHANNEL_IDS", [])
    client = _client()

    asyncio.run(edit_hook.handle(client, _message(content="helo"), _message(content="hello")))
    asyncio.run(edit_hook.handle(client, _message(), _message()))
    asyncio.run(edit_hook.handle(client, _message(content="a", bot=True), _message(content="b", bot=True)))

    (event,) = client.relay.queue.events
    assert event.is_edit
    assert event.text == "hello"


def test_ready_hook_sets_presence_and_starts_sweeper(monkeypatch):
    start = AsyncMock()
    monkeypatch.setattr(ready_hook.scheduler, "start", start)
    monkeypatch.setattr(ready_hook.core, "GPT_MODEL", "gpt-4.1")
    monkeypatch.setattr(ready_hook.core, "GPT_PROMPT", "Translate every message between English and French.")
    client = _client()

    asyncio.run(ready_hook.handle(client))

    activity = client.change_presence.await_args.kwargs["activity"]
    assert isinstance(activity, discord.CustomActivity)
    assert activity.name == "gpt-4.1. Translate every message between English a"
    assert len(activity.name) <= 50
    start.assert_awaited_once_with(client.relay.sweeper, ready_hook.cache.SWEEP_INTERVAL)
