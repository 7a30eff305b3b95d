"""
Completion exchange: retried establishment followed by a drained stream.

Purpose
-------
``send_context_with_retry`` wraps ``CompletionClient.send_context`` in the
retry policy; ``request_completion`` adds draining so callers receive the
full reply text (or a single ``ReplError``).

Notes
-----
Only establishment is retried. Once a stream is returned, a mid-stream error
ends the exchange.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional, Sequence

from ..base.errors import ReplError
from ..base.interfaces import CompletionClient
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import CompletionDelta, Message
from ..base.resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry
from ..base.streaming import drain_stream

_logger = get_logger("gptrepl.completion")


def _attempt_logger(model: str):
    ctx = LogContext(model=model)

    def _log(*, attempt: int, max_attempts: int, delay: float | None, error: ReplError | None) -> None:
        normalized_log_event(
            _logger,
            "retry.attempt",
            ctx,
            phase="establish",
            attempt=attempt + 1,
            error_code=error.code.value if error is not None else None,
            max_attempts=max_attempts,
            delay=delay,
            error=str(error) if error is not None else None,
            level=logging.INFO if error is not None else logging.DEBUG,
        )

    return _log


def send_context_with_retry(
    client: CompletionClient,
    messages: Sequence[Message],
    model: str,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> Iterable[CompletionDelta]:
    """Establish an exchange, retrying according to ``config``.

    Raises
    ------
    ReplError
        ``failed to send context (after N retries): <cause>`` once the budget
        is spent or the cause is not retryable; ``N`` counts the retries
        actually made and the code of the last cause is preserved.
    """
    if config.attempt_logger is None:
        config = replace(config, attempt_logger=_attempt_logger(model))
    snapshot = list(messages)
    attempts = 0

    @retry(config)
    def _establish() -> Iterable[CompletionDelta]:
        nonlocal attempts
        attempts += 1
        return client.send_context(snapshot, model)

    try:
        return _establish()
    except ReplError as e:
        raise ReplError(
            code=e.code,
            message=f"failed to send context (after {attempts - 1} retries): {e}",
            raw=e,
        ) from e


def request_completion(
    client: CompletionClient,
    messages: Sequence[Message],
    model: str,
    *,
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    on_delta: Optional[Callable[[str], None]] = None,
) -> str:
    """Run one full exchange and return the reply text.

    ``on_delta`` receives each fragment as it arrives so the caller can echo
    the reply live.
    """
    ctx = LogContext(model=model, extra={"messages": len(messages)})
    normalized_log_event(_logger, "exchange.start", ctx, phase="start")
    try:
        stream = send_context_with_retry(client, messages, model, retry_config)
        reply = drain_stream(stream, on_delta)
    except ReplError as e:
        normalized_log_event(
            _logger,
            "exchange.error",
            ctx,
            phase="error",
            error_code=e.code.value,
            error=str(e),
            level=logging.INFO,
        )
        raise
    normalized_log_event(_logger, "exchange.finalize", ctx, phase="finalize", emitted=bool(reply), chars=len(reply))
    return reply


__all__ = ["send_context_with_retry", "request_completion"]
