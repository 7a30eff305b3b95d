"""
CompletionDelta: one item of a streamed completion.

A delta is either a text fragment (``finish`` is False) or the terminal value
of the stream (``finish`` is True), in which case ``error`` tells a clean
end-of-stream apart from a propagated failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import ReplError


@dataclass(frozen=True)
class CompletionDelta:
    """Represents an incremental fragment or the terminal outcome of a stream.

    Fields:
      text: textual fragment (empty for terminal values)
      finish: True on the terminal value
      error: set when the stream ended with a failure (``finish`` is True)
    """

    text: str = ""
    finish: bool = False
    error: Optional[ReplError] = None

    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def fragment(cls, text: str) -> "CompletionDelta":
        return cls(text=text)

    @classmethod
    def end(cls) -> "CompletionDelta":
        return cls(finish=True)

    @classmethod
    def failure(cls, error: ReplError) -> "CompletionDelta":
        return cls(finish=True, error=error)


__all__ = ["CompletionDelta"]
