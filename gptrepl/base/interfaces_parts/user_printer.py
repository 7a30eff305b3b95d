"""UserPrinter Protocol (single-class module)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class UserPrinter(Protocol):
    """Operator-facing output channel.

    ``print`` writes text verbatim (no newline added); ``warn`` and ``error``
    write one diagnostic line each.
    """

    def print(self, text: str) -> None: ...

    def warn(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


__all__ = ["UserPrinter"]
