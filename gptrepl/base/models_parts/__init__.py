"""Model parts package (one class per file)."""

from .message import Message, Role, ROLES, is_valid_role
from .completion_delta import CompletionDelta

__all__ = ["Message", "Role", "ROLES", "is_valid_role", "CompletionDelta"]
