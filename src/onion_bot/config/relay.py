import os

from .loader import as_bool

DEFAULT_LOADING_LABEL = "🧅 Translating"
DEFAULT_ERROR_MESSAGE = "❗ OnionBot failed to translate. Please try again."
DEFAULT_LENGTH_WARNING = "⚠️ The message is too long. Please keep it under {limit} characters."


class Relay:
    def __init__(self, config: dict | None = None) -> None:
        relay_cfg = (config or {}).get("onion_bot", {}).get("relay", {})

        # -- input limits --
        self.MAX_INPUT_LENGTH: int = int(relay_cfg.get("max_input_length", os.getenv("MAX_INPUT_LENGTH", "3000")))
        # Kept below Discord's 2000 character hard limit.
        self.MAX_CHUNK_LENGTH: int = int(relay_cfg.get("max_chunk_length", os.getenv("MAX_CHUNK_LENGTH", "1950")))

        # -- rate limiting --
        self.RATE_LIMIT_POINTS: int = int(relay_cfg.get("rate_limit_points", os.getenv("RATE_LIMIT_POINTS", "5")))
        self.RATE_LIMIT_DURATION: float = float(
            relay_cfg.get("rate_limit_duration", os.getenv("RATE_LIMIT_DURATION", "1"))
        )

        # -- delivery retries --
        self.RETRY_DELAY: float = float(relay_cfg.get("retry_delay", os.getenv("RETRY_DELAY", "5")))
        self.MAX_RETRY_ATTEMPTS: int = int(relay_cfg.get("max_retry_attempts", os.getenv("MAX_RETRY_ATTEMPTS", "2")))

        # -- progress animation --
        self.LOADING_INTERVAL: float = float(relay_cfg.get("loading_interval", os.getenv("LOADING_INTERVAL", "0.5")))
        self.MAX_LOADING_DURATION: float = float(
            relay_cfg.get("max_loading_duration", os.getenv("MAX_LOADING_DURATION", "10"))
        )

        # -- dialog assembly --
        self.CHAIN_WALKING: bool = as_bool(relay_cfg.get("chain_walking", os.getenv("CHAIN_WALKING", "1")))
        self.MAX_CHAIN_LENGTH: int = int(relay_cfg.get("max_chain_length", os.getenv("MAX_CHAIN_LENGTH", "100")))
        self.EDIT_REUSE: bool = as_bool(relay_cfg.get("edit_reuse", os.getenv("EDIT_REUSE", "1")))

        # -- output handling --
        self.NOT_APPLICABLE_KEYWORD: str = str(
            relay_cfg.get("not_applicable_keyword", os.getenv("NOT_APPLICABLE_KEYWORD", "not translatable"))
        )
        self.NORMALIZE_OUTPUT: bool = as_bool(relay_cfg.get("normalize_output", os.getenv("NORMALIZE_OUTPUT", "1")))

        # -- shutdown --
        self.SHUTDOWN_POLL_INTERVAL: float = float(
            relay_cfg.get("shutdown_poll_interval", os.getenv("SHUTDOWN_POLL_INTERVAL", "0.1"))
        )

        # -- user-visible texts --
        self.LOADING_LABEL: str = str(relay_cfg.get("loading_label", os.getenv("LOADING_LABEL", DEFAULT_LOADING_LABEL)))
        self.ERROR_MESSAGE: str = str(relay_cfg.get("error_message", os.getenv("ERROR_MESSAGE", DEFAULT_ERROR_MESSAGE)))
        warning = relay_cfg.get("length_warning", os.getenv("LENGTH_WARNING_MESSAGE", DEFAULT_LENGTH_WARNING))
        self.LENGTH_WARNING_MESSAGE: str = str(warning).replace("{limit}", str(self.MAX_INPUT_LENGTH))
