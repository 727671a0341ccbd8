"""Error taxonomy for the relay pipeline."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""


class GatewayError(RelayError):
    """A chat-platform call failed."""


class PlaceholderError(GatewayError):
    """The progress placeholder could not be posted."""


class GenerationError(RelayError):
    """The language model failed to produce a reply."""

    def __init__(self, kind: str, detail: str = "") -> None:
        super().__init__(f"{kind}: {detail}" if detail else kind)
        self.kind = kind
        self.detail = detail


__all__ = ["RelayError", "GatewayError", "PlaceholderError", "GenerationError"]
