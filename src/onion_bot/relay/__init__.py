"""
Message relay core.

``filters``
    Translatability and length checks.
``ratelimit``
    Per-author fixed-window rate limiter.
``orchestrator``
    Runs one event from intake to delivered reply.
``queue`` / ``shutdown``
    Sequential worker, retries and graceful drain.
``pipeline``
    Builds the components above from configuration.
"""
