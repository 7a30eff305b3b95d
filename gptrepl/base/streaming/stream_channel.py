"""Bounded hand-off between an SDK stream and the session thread.

A producer thread owns the SDK stream: it translates raw chunks into
:class:`CompletionDelta` fragments, pushes them through a bounded
``queue.Queue`` and finishes with exactly one terminal value (clean end or
error). The SDK stream is closed exactly once, on every exit path.

The consumer side, :class:`ChatStream`, is a pull-based single-consumer
iterator. It yields the fragments followed by the terminal delta and then
stops; it cannot be restarted.
"""

from __future__ import annotations

import queue
import threading
from contextlib import suppress
from typing import Any, Callable, Iterable, Iterator, Optional

from ..errors import ReplError, classify_exception
from ..logging import get_logger, normalized_log_event
from ..models import CompletionDelta

DEFAULT_QUEUE_SIZE = 32
_PUT_POLL_SECONDS = 0.1

ChunkTranslator = Callable[[Any], Optional[str]]

_logger = get_logger("gptrepl.streaming")


def _close_source(source: Any) -> None:
    closer = getattr(source, "close", None)
    if callable(closer):
        closer()


class ChatStream:
    """Pull-based iterator over one completion stream.

    Attributes:
        terminal: The terminal delta once it has been consumed, else ``None``.
    """

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue: "queue.Queue[CompletionDelta]" = queue.Queue(maxsize=maxsize)
        self._abandoned = threading.Event()
        self._thread: threading.Thread | None = None
        self.terminal: CompletionDelta | None = None

    # Producer side ---------------------------------------------------------
    def _offer(self, delta: CompletionDelta) -> bool:
        """Block until ``delta`` is queued; False when the consumer went away."""
        while not self._abandoned.is_set():
            try:
                self._queue.put(delta, timeout=_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self, source: Iterable[Any], translate: ChunkTranslator) -> None:
        emitted = 0
        terminal = CompletionDelta.end()
        try:
            for chunk in source:
                text = translate(chunk)
                if not text:
                    continue
                emitted += 1
                if not self._offer(CompletionDelta.fragment(text)):
                    return
        except Exception as e:  # noqa: BLE001 - any source failure becomes the terminal value
            err = e if isinstance(e, ReplError) else ReplError(code=classify_exception(e), message=str(e), raw=e)
            terminal = CompletionDelta.failure(err)
            normalized_log_event(
                _logger,
                "stream.error",
                phase="stream",
                error_code=err.code.value,
                emitted=emitted > 0,
                fragments=emitted,
            )
        else:
            normalized_log_event(_logger, "stream.end", phase="finalize", emitted=emitted > 0, fragments=emitted)
        finally:
            with suppress(Exception):
                _close_source(source)
        self._offer(terminal)

    def start(self, source: Iterable[Any], translate: ChunkTranslator) -> "ChatStream":
        if self._thread is not None:
            raise RuntimeError("stream already started")
        self._thread = threading.Thread(
            target=self._produce,
            args=(source, translate),
            name="gptrepl-stream",
            daemon=True,
        )
        self._thread.start()
        return self

    # Consumer side ---------------------------------------------------------
    def __iter__(self) -> Iterator[CompletionDelta]:
        return self

    def __next__(self) -> CompletionDelta:
        if self.terminal is not None:
            raise StopIteration
        delta = self._queue.get()
        if delta.finish:
            self.terminal = delta
        return delta

    def close(self) -> None:
        """Abandon the stream; the producer stops at its next hand-off."""
        self._abandoned.set()
        if self.terminal is None:
            self.terminal = CompletionDelta.end()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


def start_stream(
    source: Iterable[Any],
    translate: ChunkTranslator = lambda chunk: chunk,
    *,
    maxsize: int = DEFAULT_QUEUE_SIZE,
) -> ChatStream:
    """Spawn the producer for ``source`` and return the consumer handle."""
    return ChatStream(maxsize=maxsize).start(source, translate)


__all__ = ["ChatStream", "ChunkTranslator", "DEFAULT_QUEUE_SIZE", "start_stream"]
