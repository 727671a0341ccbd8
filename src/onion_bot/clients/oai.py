"""Helpers for interacting with OpenAI API"""
from openai import AsyncOpenAI
from onion_bot.config import core

import logging
logger = logging.getLogger(__name__)

# One global async-capable client
aoai = AsyncOpenAI(api_key=core.OPENAI_API_KEY)


async def chat(
    messages: list[dict],
    model: str = core.GPT_MODEL,
    *,
    max_completion_tokens: int | None = None,
) -> str:
    """
    Send a chat completion request to OpenAI and return the response text.

    Example message format:
    .. code-block:: python
        [
            {
                "role": "user",
                "content": "Hello, how are you?",
                "name": "alice"
            },
            {
                "role": "system",
                "content": "Translate every message into English."
            }
        ]
    """
    kwargs = {"model": model, "messages": messages, "n": 1}
    if max_completion_tokens:
        kwargs["max_completion_tokens"] = max_completion_tokens

    resp = await aoai.chat.completions.create(**kwargs)
    if not resp.choices:
        return ""

    content = resp.choices[0].message.content or ""
    logger.info("OpenAI response. Model %s, %d chars", resp.model, len(content))
    return content.strip()


async def respond(
    messages: list[dict],
    model: str = core.GPT_MODEL,
    *,
    max_output_tokens: int | None = None,
) -> str:
    """
    Generate through the Responses API.

    Some models (``o1-pro``) are not served by chat completions; the same
    role/content messages are sent as Responses ``input`` items instead.
    """
    kwargs = {"model": model, "input": messages}
    if max_output_tokens:
        kwargs["max_output_tokens"] = max_output_tokens

    resp = await aoai.responses.create(**kwargs)
    text = resp.output_text or ""
    logger.info("OpenAI response (responses api). Model %s, %d chars", model, len(text))
    return text.strip()
