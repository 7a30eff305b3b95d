"""Consumer-side helpers for completion streams."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from ..errors import ErrorCode, ReplError
from ..models import CompletionDelta


def drain_stream(stream: Iterable[CompletionDelta], on_delta: Optional[Callable[[str], None]] = None) -> str:
    """Concatenate every fragment of ``stream`` until its terminal value.

    Each fragment is passed to ``on_delta`` as it arrives. A terminal error
    discards the partial text and raises ``ReplError(NETWORK)`` with the
    message ``stream error: <cause>``.
    """
    parts: List[str] = []
    for delta in stream:
        if delta.finish:
            if delta.error is not None:
                raise ReplError(
                    code=ErrorCode.NETWORK,
                    message=f"stream error: {delta.error}",
                    raw=delta.error,
                )
            break
        parts.append(delta.text)
        if on_delta is not None:
            on_delta(delta.text)
    return "".join(parts)


__all__ = ["drain_stream"]
