import os, sys
import itertools
import warnings
from pathlib import Path

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for onion_bot.config
os.environ.setdefault("DISCORD_BOT_TOKEN", "test-token")
os.environ.setdefault("OPENAI_API_KEY", "test-openai")
os.environ.setdefault("GPT_MODEL", "gpt-4.1")

# Silence deprecation warnings surfaced from third-party dependencies during tests
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


def pytest_configure(config):
    warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


from onion_bot.memory.cache.records import MessageRecord  # noqa: E402
from onion_bot.relay.errors import GatewayError  # noqa: E402
from onion_bot.relay.models import BotIdentity, InboundEvent  # noqa: E402

BOT_ID = 999
CHANNEL_ID = 1


class FakeGateway:
    """In-memory chat platform.

    ``messages`` holds records that ``fetch_message`` can find; ``posted``
    holds the current text of every message the relay sent.
    """

    def __init__(self) -> None:
        self.identity = BotIdentity(id=BOT_ID, name="OnionBot")
        self.messages: dict[int, MessageRecord] = {}
        self.posted: dict[int, str] = {}
        self.replies: list[tuple[int, int, str]] = []
        self.edits: list[tuple[int, str]] = []
        self.deleted: list[int] = []
        self.fetches: list[int] = []
        self.not_editable: set[int] = set()
        self.reply_failures = 0
        self._ids = itertools.count(10_000)

    def bot_identity(self):
        return self.identity

    async def fetch_message(self, channel_id, message_id):
        self.fetches.append(message_id)
        return self.messages.get(message_id)

    async def send_message(self, channel_id, text):
        new_id = next(self._ids)
        self.posted[new_id] = text
        return new_id

    async def reply_to_message(self, channel_id, message_id, text):
        if self.reply_failures:
            self.reply_failures -= 1
            raise GatewayError("channel unavailable")
        new_id = next(self._ids)
        self.posted[new_id] = text
        self.replies.append((message_id, new_id, text))
        return new_id

    async def edit_message(self, channel_id, message_id, text):
        if message_id in self.not_editable or message_id not in self.posted:
            return False
        self.posted[message_id] = text
        self.edits.append((message_id, text))
        return True

    async def delete_message(self, channel_id, message_id):
        self.deleted.append(message_id)
        return self.posted.pop(message_id, None) is not None


class FakeModel:
    """Language model returning scripted replies (or raising scripted errors)."""

    def __init__(self, *replies) -> None:
        self.replies = list(replies) or ["bonjour"]
        self.calls: list[tuple[list, object]] = []

    async def generate(self, dialog, instruction):
        self.calls.append((list(dialog), instruction))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def make_event():
    ids = itertools.count(1)

    def _make(text="hello", **overrides):
        fields = dict(
            id=next(ids),
            channel_id=CHANNEL_ID,
            author_id=42,
            author_name="alice",
            text=text,
            created_at=1_700_000_000.0,
        )
        fields.update(overrides)
        return InboundEvent(**fields)

    return _make


@pytest.fixture
def make_record():
    def _make(message_id, text="hi", *, parent=None, own=False, created_at=1_700_000_000.0, author_id=42):
        return MessageRecord(
            id=message_id,
            channel_id=CHANNEL_ID,
            author_id=BOT_ID if own else author_id,
            author_name="OnionBot" if own else "alice",
            text=text,
            created_at=created_at,
            referenced_message_id=parent,
            is_own_reply=own,
        )

    return _make


@pytest.fixture
def make_model():
    return FakeModel
