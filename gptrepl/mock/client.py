"""Scripted offline completion client.

Purpose
-------
Stand in for the network backend in tests and offline sessions
(``GPTREPL_USE_MOCKS=1``). The client replays a fixed list of fragments
through the same bounded stream channel the real client uses, so the retry,
drain and session layers run unchanged.

Behaviour knobs
---------------
- ``fail_times``: the first N ``send_context`` calls raise ``error``.
- ``midstream_error``: after the fragments, end the stream with this error.
- ``received``: every context snapshot the client was asked to send.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from ..base.errors import ErrorCode, ReplError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import Message
from ..base.streaming import ChatStream, start_stream

DEFAULT_MOCK_REPLY = ("This is a mock reply", " from gptrepl.")


class ScriptedCompletionClient:
    """Deterministic ``CompletionClient`` replaying scripted fragments."""

    def __init__(
        self,
        fragments: Sequence[str] = DEFAULT_MOCK_REPLY,
        *,
        fail_times: int = 0,
        error: Optional[ReplError] = None,
        midstream_error: Optional[ReplError] = None,
    ) -> None:
        self.fragments: List[str] = list(fragments)
        self.fail_times = fail_times
        self.error = error or ReplError(code=ErrorCode.UNAVAILABLE, message="mock backend unavailable")
        self.midstream_error = midstream_error
        self.received: List[List[Message]] = []
        self.calls = 0
        self._logger = get_logger("gptrepl.mock")

    def _chunks(self) -> Iterator[str]:
        yield from self.fragments
        if self.midstream_error is not None:
            raise self.midstream_error

    def send_context(self, messages: Sequence[Message], model: str) -> ChatStream:
        self.calls += 1
        self.received.append(list(messages))
        if self.calls <= self.fail_times:
            normalized_log_event(
                self._logger,
                "exchange.error",
                LogContext(model=model),
                phase="establish",
                attempt=self.calls,
                error_code=self.error.code.value,
            )
            raise self.error
        return start_stream(self._chunks())


__all__ = ["ScriptedCompletionClient", "DEFAULT_MOCK_REPLY"]
