import logging
import os
from typing import List

from .loader import as_bool

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1"
DEFAULT_PROMPT = "You are a helpful assistant. Respond briefly, but informatively."

# Model families that reject "system"/"developer" instructions entirely.
_NO_DEVELOPER_PREFIXES = ("o1-mini", "o1-preview")
# Reasoning models that expect the instruction under the "developer" role.
_DEVELOPER_PREFIXES = ("o1", "o3", "o4")
# Models only reachable through the Responses API.
_NO_CHAT_COMPLETION_PREFIXES = ("o1-pro",)


def _split_ids(raw: str) -> List[int]:
    return [int(cid.strip()) for cid in raw.split(",") if cid.strip()]


def _matches_family(model: str, prefixes: tuple[str, ...]) -> bool:
    lowered = model.lower()
    return any(lowered == prefix or lowered.startswith(prefix + "-") for prefix in prefixes)


def default_system_role(model: str) -> str:
    """Return the role the instruction turn should use for ``model``."""

    if _matches_family(model, _NO_DEVELOPER_PREFIXES):
        return "user"
    if _matches_family(model, _DEVELOPER_PREFIXES):
        return "developer"
    return "system"


def default_no_chat_completion(model: str) -> bool:
    return _matches_family(model, _NO_CHAT_COMPLETION_PREFIXES)


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("onion_bot", {})
        discord_cfg = cfg.get("discord", {})
        models_cfg = cfg.get("models", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_BOT_TOKEN"))
        openai_env = str(discord_cfg.get("openai_key_env", "OPENAI_API_KEY"))

        self.DISCORD_BOT_TOKEN: str | None = os.getenv(token_env)
        self.OPENAI_API_KEY: str | None = os.getenv(openai_env)

        channel_ids_cfg = discord_cfg.get("channel_ids")
        if channel_ids_cfg:
            self.CHANNEL_IDS: List[int] = [int(cid) for cid in channel_ids_cfg]
        else:
            self.CHANNEL_IDS = _split_ids(os.getenv("CHANNEL_IDS", ""))

        self.GPT_MODEL: str = str(models_cfg.get("model") or os.getenv("GPT_MODEL") or DEFAULT_MODEL)
        self.GPT_PROMPT: str = str(models_cfg.get("prompt") or os.getenv("GPT_PROMPT") or DEFAULT_PROMPT)
        self.GPT_SYSTEM_ROLE: str = str(
            models_cfg.get("system_role") or os.getenv("GPT_SYSTEM_ROLE") or default_system_role(self.GPT_MODEL)
        )

        no_chat_raw = models_cfg.get("no_chat_completion_api", os.getenv("GPT_NO_CHAT_COMPLETION_API"))
        if no_chat_raw is None or no_chat_raw == "":
            self.GPT_NO_CHAT_COMPLETION_API: bool = default_no_chat_completion(self.GPT_MODEL)
        else:
            self.GPT_NO_CHAT_COMPLETION_API = as_bool(no_chat_raw)

        self.MAX_COMPLETION_TOKENS: int = int(
            models_cfg.get("max_completion_tokens", os.getenv("MAX_COMPLETION_TOKENS", "4096"))
        )

        required = [
            ("DISCORD_BOT_TOKEN", self.DISCORD_BOT_TOKEN),
            ("OPENAI_API_KEY", self.OPENAI_API_KEY),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")

        logger.debug(
            "Model %s (instruction role=%s, responses api=%s)",
            self.GPT_MODEL,
            self.GPT_SYSTEM_ROLE,
            self.GPT_NO_CHAT_COMPLETION_API,
        )
