"""In-memory conversation context store.

Owns the ordered message transcript and exposes the only primitives allowed
to mutate it: append one, remove the last ``n``, replace everything, and
splice a foreign sequence at the front or back. No I/O happens here; the
owner passes an ``on_change`` hook (the session wires it to the autosave
refresh) that fires after every successful mutation.

Thread safety: not thread-safe. The store assumes a single writer.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from ..errors import ErrorCode, ReplError
from ..models import Message, is_valid_role

ChangeHook = Callable[[], None]


def _checked(messages: Iterable[Message]) -> List[Message]:
    out = list(messages)
    for idx, msg in enumerate(out):
        if not is_valid_role(msg.role):
            raise ReplError(
                code=ErrorCode.INVALID_ROLE,
                message=f'message #{idx} (starting from zero) has an invalid "role" attribute',
                index=idx,
            )
    return out


class ContextStore:
    """Ordered message transcript with invariant-preserving mutations.

    Parameters
    ----------
    messages:
        Optional initial transcript (validated).
    on_change:
        Callable invoked after every successful mutation.
    """

    def __init__(self, messages: Optional[Iterable[Message]] = None, *, on_change: Optional[ChangeHook] = None) -> None:
        self._messages: List[Message] = _checked(messages or ())
        self.on_change = on_change

    # Read access -----------------------------------------------------------
    @property
    def messages(self) -> List[Message]:
        """Return a copy of the transcript."""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, idx: int) -> Message:
        return self._messages[idx]

    # Mutations -------------------------------------------------------------
    def append(self, msg: Message) -> None:
        """Append a single message."""
        self._messages.append(_checked((msg,))[0])
        self._changed()

    def pop_last(self, n: int) -> None:
        """Remove the last ``n`` messages.

        Raises
        ------
        ReplError
            ``INVALID_ARGUMENT`` when ``n < 1``; ``INVALID_RANGE`` when ``n``
            exceeds the current length. The transcript is left untouched.
        """
        if n < 1:
            raise ReplError(code=ErrorCode.INVALID_ARGUMENT, message="n must be at least 1")
        if n > len(self._messages):
            raise ReplError(
                code=ErrorCode.INVALID_RANGE,
                message=(
                    f"can't pop {n} elements from the context because it only "
                    f"contains {len(self._messages)} elements"
                ),
            )
        del self._messages[-n:]
        self._changed()

    def replace(self, messages: Sequence[Message]) -> None:
        """Discard the transcript and install ``messages``."""
        self._messages = _checked(messages)
        self._changed()

    def prepend(self, messages: Sequence[Message]) -> None:
        """Splice ``messages`` in front of the transcript."""
        self._messages = _checked(messages) + self._messages
        self._changed()

    def extend(self, messages: Sequence[Message]) -> None:
        """Splice ``messages`` after the transcript."""
        self._messages.extend(_checked(messages))
        self._changed()

    def clear(self) -> None:
        self.replace(())

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()


__all__ = ["ContextStore", "ChangeHook"]
