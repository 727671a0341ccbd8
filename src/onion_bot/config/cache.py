import os


class Cache:
    def __init__(self, config: dict | None = None) -> None:
        cache_cfg = (config or {}).get("onion_bot", {}).get("cache", {})
        self.CACHE_LENGTH: int = int(cache_cfg.get("cache_length", os.getenv("CACHE_LENGTH", "1000")))
        self.LEDGER_LENGTH: int = int(cache_cfg.get("ledger_length", os.getenv("LEDGER_LENGTH", "5000")))
        # Lifetimes are in seconds; records reachable from our own replies live longer.
        self.USEFUL_LIFETIME: float = float(
            cache_cfg.get("useful_lifetime", os.getenv("USEFUL_LIFETIME", str(7 * 24 * 3600)))
        )
        self.TRANSIENT_LIFETIME: float = float(
            cache_cfg.get("transient_lifetime", os.getenv("TRANSIENT_LIFETIME", str(24 * 3600)))
        )
        self.SWEEP_INTERVAL: float = float(cache_cfg.get("sweep_interval", os.getenv("SWEEP_INTERVAL", "3600")))
