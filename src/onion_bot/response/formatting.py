"""Text clean-up applied to model input and output."""

from __future__ import annotations

import re
from typing import Callable

_BLANK_LINES_RE = re.compile(r"\n{2,}")
# "🇺🇸 [EN]" style headers emitted by translation prompts.
_FLAG_TAG_RE = re.compile(r"(?<!^)(?<!\n)([\U0001F1E6-\U0001F1FF]{2} \[[A-Z]{2,3}\])")
_LEADING_MENTION_RE = re.compile(r"^<@!?(\d+)>")


def normalize_reply(text: str) -> str:
    """Collapse blank lines and put each flag-tagged section on its own line."""

    normalized = _BLANK_LINES_RE.sub("\n", text)
    normalized = _FLAG_TAG_RE.sub(r"\n\1", normalized)
    return normalized.lstrip()


def is_not_applicable(text: str | None, keyword: str) -> bool:
    """Return ``True`` when the model declined or produced nothing."""

    if not text or not text.strip():
        return True
    return bool(keyword) and keyword.lower() in text.lower()


def rewrite_mentions(
    text: str,
    *,
    self_id: int | None,
    resolve_name: Callable[[int], str | None],
) -> str:
    """Turn a leading ``<@id>`` into something the model can read.

    A mention of the bot itself is dropped, a mention of a known user becomes
    ``"Name, ..."``; unknown users are left untouched.
    """

    match = _LEADING_MENTION_RE.match(text)
    if not match:
        return text

    user_id = int(match.group(1))
    rest = text[match.end():].lstrip()
    if self_id is not None and user_id == self_id:
        return rest

    name = resolve_name(user_id)
    if name:
        rest = rest.lstrip(" ,")
        return f"{name}, {rest}"
    return text


__all__ = ["normalize_reply", "is_not_applicable", "rewrite_mentions"]
