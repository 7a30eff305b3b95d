"""Contract tests for the bounded stream channel and draining."""

from __future__ import annotations

import threading

import pytest

from gptrepl.base.errors import ErrorCode, ReplError
from gptrepl.base.models import CompletionDelta
from gptrepl.base.streaming import drain_stream, start_stream


class _Source:
    """Iterable chunk source recording how often it was closed."""

    def __init__(self, chunks, error: Exception | None = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.closed = 0

    def __iter__(self):
        yield from self._chunks
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.closed += 1


def test_fragments_then_single_clean_terminal():
    src = _Source(["a", "", "b"])
    stream = start_stream(src)
    deltas = list(stream)
    stream.join(timeout=2)
    assert [d.text for d in deltas if not d.finish] == ["a", "b"]  # nosec B101
    assert sum(1 for d in deltas if d.finish) == 1  # nosec B101
    assert deltas[-1] == CompletionDelta.end()  # nosec B101
    assert src.closed == 1  # nosec B101


def test_source_failure_becomes_terminal_error_and_closes_once():
    src = _Source(["a"], error=ConnectionResetError("reset by peer"))
    stream = start_stream(src)
    deltas = list(stream)
    stream.join(timeout=2)
    terminal = deltas[-1]
    assert terminal.finish and terminal.is_error()  # nosec B101
    assert terminal.error.code is ErrorCode.NETWORK  # nosec B101
    assert src.closed == 1  # nosec B101


def test_stream_is_not_restartable():
    stream = start_stream(_Source(["x"]))
    assert len(list(stream)) == 2  # nosec B101
    assert list(stream) == []  # nosec B101


def test_translator_drops_empty_chunks():
    stream = start_stream([{"t": "a"}, {"t": None}, {"t": "b"}], lambda c: c["t"])
    assert drain_stream(stream) == "ab"  # nosec B101


def test_bounded_queue_blocks_producer_until_consumed():
    released = threading.Event()

    def chunks():
        for i in range(10):
            yield str(i)
        released.set()

    stream = start_stream(chunks(), maxsize=2)
    assert not released.wait(timeout=0.2)  # nosec B101
    assert drain_stream(stream) == "0123456789"  # nosec B101
    assert released.wait(timeout=2)  # nosec B101


def test_drain_echoes_fragments_in_order():
    seen = []
    text = drain_stream(start_stream(["abc ", "def"]), seen.append)
    assert text == "abc def"  # nosec B101
    assert seen == ["abc ", "def"]  # nosec B101


def test_drain_discards_partial_text_on_error():
    seen = []
    cause = ReplError(code=ErrorCode.NETWORK, message="connection dropped")
    with pytest.raises(ReplError) as ei:
        drain_stream(start_stream(_Source(["abc "], error=cause)), seen.append)
    assert str(ei.value) == "stream error: connection dropped"  # nosec B101
    assert ei.value.code is ErrorCode.NETWORK  # nosec B101
    assert seen == ["abc "]  # nosec B101


def test_close_abandons_producer():
    src = _Source([str(i) for i in range(100)])
    stream = start_stream(src, maxsize=1)
    first = next(stream)
    assert first.text == "0"  # nosec B101
    stream.close()
    stream.join(timeout=2)
    assert src.closed == 1  # nosec B101
    assert list(stream) == []  # nosec B101
