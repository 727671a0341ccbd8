"""Discord and model service clients."""
