"""
Structured REPL error exception type.

Wraps command, persistence and completion failures with a normalized
`ErrorCode` so the session loop can report them uniformly.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ReplError(Exception):
    """Represents a structured REPL error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable message, printed to the operator as-is.
        path: Optional file path involved in the failure.
        index: Optional zero-based record index (invalid roles in context files).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    path: Optional[str] = None
    index: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


__all__ = ["ReplError"]
