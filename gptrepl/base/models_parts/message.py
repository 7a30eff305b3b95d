"""
Message DTO used across the REPL.

Defines the `Message` dataclass and the `Role` literal representing the sender
role. Roles form a closed set; helpers are provided for validating untrusted
role strings (command arguments, context files).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple


# Message roles accepted by the conversation context.
Role = Literal["system", "user", "assistant"]

ROLES: Tuple[str, ...] = ("user", "assistant", "system")


def is_valid_role(role: object) -> bool:
    """Return True when ``role`` is one of the closed set of message roles."""
    return isinstance(role, str) and role in ROLES


@dataclass(frozen=True)
class Message:
    """A single conversation turn.

    Attributes:
        role: The role of the message author (``"system"``, ``"user"`` or
            ``"assistant"``).
        content: Plain text content; may be empty.
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Return the ``{role, content}`` mapping used on disk and on the wire."""
        return {"role": self.role, "content": self.content}


__all__ = [
    "Message",
    "Role",
    "ROLES",
    "is_valid_role",
]
