"""LineReader Protocol (single-class module)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LineReader(Protocol):
    """Source of operator input lines.

    ``readline`` returns one line without its trailing newline and raises
    ``EOFError`` once input is exhausted.
    """

    def readline(self) -> str: ...


__all__ = ["LineReader"]
