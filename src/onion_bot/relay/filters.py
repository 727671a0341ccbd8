"""
Translatability checks for inbound text.

:func:`is_translatable` is a pure predicate deciding whether a message carries
enough language to be worth sending to the model. It rejects blank text, bare
links, emoji-only messages, short kaomoji/decorative symbol strings and text
without a single letter or digit in any script. Discord mention markup is
ignored, so a bare ``<@id>`` counts as blank.
"""

from __future__ import annotations

import re
import unicodedata

DECORATIVE_LENGTH_THRESHOLD = 15

_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
_KEYCAP_RE = re.compile(r"[0-9#*]\ufe0f?\u20e3")
# User, role and channel mentions carry ids, not language.
_MENTION_RE = re.compile(r"<(?:@[!&]?|#)\d+>")

_ZWJ = "\u200d"
_KEYCAP = "\u20e3"

# Box drawing, CJK symbols & punctuation, half/full-width forms.
_DECORATIVE_RANGES = (
    (0x2500, 0x257F),
    (0x3000, 0x303F),
    (0xFF00, 0xFFEF),
)


def _is_variation_selector(ch: str) -> bool:
    cp = ord(ch)
    return 0xFE00 <= cp <= 0xFE0F or 0xE0100 <= cp <= 0xE01EF


def _is_emoji_part(ch: str) -> bool:
    if ch.isspace() or ch in (_ZWJ, _KEYCAP) or _is_variation_selector(ch):
        return True
    cp = ord(ch)
    # Tag characters used by subdivision flags.
    if 0xE0020 <= cp <= 0xE007F:
        return True
    # So covers pictographs and regional indicators, Sk covers skin tones.
    return unicodedata.category(ch) in ("So", "Sk")


def _is_decorative(ch: str) -> bool:
    if _is_emoji_part(ch):
        return True
    cp = ord(ch)
    if any(lo <= cp <= hi for lo, hi in _DECORATIVE_RANGES):
        return True
    category = unicodedata.category(ch)
    return category[0] in ("P", "S") or category in ("Mn", "Me", "Cf")


def is_emoji_only(text: str) -> bool:
    stripped = _KEYCAP_RE.sub("", text).strip()
    return all(_is_emoji_part(ch) for ch in stripped)


def is_translatable(text: str) -> bool:
    """Return ``True`` when ``text`` should be relayed to the model."""

    trimmed = _MENTION_RE.sub("", text).strip()
    if not trimmed:
        return False

    if _URL_RE.match(trimmed):
        return False

    if is_emoji_only(trimmed):
        return False

    if len(trimmed) < DECORATIVE_LENGTH_THRESHOLD and all(_is_decorative(ch) for ch in trimmed):
        return False

    return any(ch.isalnum() for ch in _KEYCAP_RE.sub("", trimmed))


def exceeds_input_limit(text: str, limit: int) -> bool:
    """Absolute length guard applied before translatability."""

    return len(text) >= limit


__all__ = ["is_translatable", "is_emoji_only", "exceeds_input_limit", "DECORATIVE_LENGTH_THRESHOLD"]
