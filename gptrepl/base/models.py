"""
REPL domain models (DTOs) public surface.

This module re-exports the one-class-per-file implementations under
``gptrepl.base.models_parts`` to keep a stable import path.
"""

from .models_parts.message import Message, Role, ROLES, is_valid_role
from .models_parts.completion_delta import CompletionDelta

__all__ = [
    "Message",
    "Role",
    "ROLES",
    "is_valid_role",
    "CompletionDelta",
]
