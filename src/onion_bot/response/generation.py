"""
Language-model collaborator used by the relay.

:class:`LanguageModelClient` turns a dialog into provider messages and picks
the backend: a local Ollama server when ``USE_LOCAL`` is set, the OpenAI
Responses API for models without chat completions, OpenAI chat completions
otherwise. Provider exceptions are converted to
:class:`~onion_bot.relay.errors.GenerationError` so the orchestrator deals
with a single failure type.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Sequence

import ollama as ollama_sdk
import openai

from onion_bot.clients import oai, ollama
from onion_bot.config import core, local_llm
from onion_bot.relay.errors import GenerationError
from onion_bot.relay.models import DialogTurn

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"[^A-Za-z0-9_-]+")
_MAX_NAME_LENGTH = 64


def sanitize_name(name: str) -> str:
    """Reduce a display name to the characters OpenAI accepts for ``name``."""

    return _NAME_RE.sub("_", name).strip("_")[:_MAX_NAME_LENGTH]


def to_chat_messages(
    dialog: Sequence[DialogTurn],
    instruction: DialogTurn,
    *,
    include_names: bool = True,
) -> list[dict]:
    """Render turns oldest-first followed by the instruction turn."""

    messages: list[dict] = []
    for turn in dialog:
        entry = {"role": turn.role, "content": turn.text}
        if include_names and turn.speaker_name:
            name = sanitize_name(turn.speaker_name)
            if name:
                entry["name"] = name
        messages.append(entry)
    messages.append({"role": instruction.role, "content": instruction.text})
    return messages


class LanguageModelClient:
    def __init__(
        self,
        *,
        model: str | None = None,
        use_local: bool | None = None,
        responses_api: bool | None = None,
        max_completion_tokens: int | None = None,
    ) -> None:
        self.use_local = local_llm.USE_LOCAL if use_local is None else use_local
        self.model = model or (local_llm.LOCAL_MODEL_ID if self.use_local else core.GPT_MODEL)
        self.responses_api = core.GPT_NO_CHAT_COMPLETION_API if responses_api is None else responses_api
        self.max_completion_tokens = max_completion_tokens or core.MAX_COMPLETION_TOKENS

    async def generate(self, dialog: Sequence[DialogTurn], instruction: DialogTurn) -> str:
        try:
            text = await self._dispatch(dialog, instruction)
        except openai.APITimeoutError as exc:
            raise GenerationError("timeout", str(exc)) from exc
        except openai.APIConnectionError as exc:
            raise GenerationError("connection", str(exc)) from exc
        except openai.RateLimitError as exc:
            raise GenerationError("rate_limited", exc.message) from exc
        except openai.APIStatusError as exc:
            raise GenerationError("api_error", f"{exc.status_code} {exc.message}") from exc
        except openai.OpenAIError as exc:
            raise GenerationError("api_error", str(exc)) from exc
        except ollama_sdk.ResponseError as exc:
            raise GenerationError("api_error", f"{exc.status_code} {exc.error}") from exc
        except asyncio.TimeoutError as exc:
            raise GenerationError("timeout", str(exc)) from exc
        except ConnectionError as exc:
            raise GenerationError("connection", str(exc)) from exc

        if not text:
            raise GenerationError("empty", f"model {self.model} returned no text")
        return text

    async def _dispatch(self, dialog: Sequence[DialogTurn], instruction: DialogTurn) -> str:
        logger.debug("Generating with %s from %d turn(s)", self.model, len(dialog))
        if self.use_local:
            messages = to_chat_messages(dialog, instruction, include_names=False)
            return await ollama.chat(messages, model=self.model)

        if self.responses_api:
            messages = to_chat_messages(dialog, instruction, include_names=False)
            return await oai.respond(
                messages, model=self.model, max_output_tokens=self.max_completion_tokens
            )

        messages = to_chat_messages(dialog, instruction)
        return await oai.chat(
            messages, model=self.model, max_completion_tokens=self.max_completion_tokens
        )


__all__ = ["LanguageModelClient", "sanitize_name", "to_chat_messages"]
