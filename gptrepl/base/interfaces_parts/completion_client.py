"""CompletionClient Protocol (single-class module)."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..models import CompletionDelta, Message


@runtime_checkable
class CompletionClient(Protocol):
    """Backend able to stream a completion for a whole context.

    Implementations should:
    - Establish the exchange synchronously and raise ``ReplError`` (network
      family) when that fails; establishment is what gets retried.
    - Return a single-consumer iterable of ``CompletionDelta`` that ends with
      exactly one terminal value.
    - Never retry mid-stream failures; report them as the terminal value.
    """

    def send_context(self, messages: Sequence[Message], model: str) -> Iterable[CompletionDelta]:
        """Send ``messages`` to ``model`` and return the delta stream.

        Raises:
            ReplError: When the exchange cannot be established.
        """
        ...


__all__ = ["CompletionClient"]
