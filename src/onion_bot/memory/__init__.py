"""In-memory state shared by the relay: reply-chain cache, ledger, retention."""
