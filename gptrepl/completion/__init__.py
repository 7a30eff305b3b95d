"""Completion exchange (retry + drain) over a ``CompletionClient``."""

from .exchange import request_completion, send_context_with_retry

__all__ = ["request_completion", "send_context_with_retry"]
