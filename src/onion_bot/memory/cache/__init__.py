"""
Short-term message cache package.

Modules
=======

``records``
    Defines :class:`~onion_bot.memory.cache.records.MessageRecord`, the
    immutable snapshot of one message known to the relay.
``store``
    Provides :class:`~onion_bot.memory.cache.store.ReplyChainCache`, the
    LRU-bounded record store that also tracks the relay's own messages.
``ledger``
    Maintains :class:`~onion_bot.memory.cache.ledger.ReplyLedger`, which maps
    processed messages to the replies posted for them.
``sweeper``
    Implements :class:`~onion_bot.memory.cache.sweeper.RetentionSweeper`, the
    reachability-aware time-based pruning pass.
"""

from .ledger import ReplyLedger
from .records import MessageRecord
from .store import ReplyChainCache
from .sweeper import RetentionSweeper

__all__ = ["MessageRecord", "ReplyChainCache", "ReplyLedger", "RetentionSweeper"]
