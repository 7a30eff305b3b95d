"""Resilience helpers (retry/backoff)."""

from .retry import AttemptLogger, RetryConfig, DEFAULT_RETRY_CONFIG, retry

__all__ = ["AttemptLogger", "RetryConfig", "DEFAULT_RETRY_CONFIG", "retry"]
