"""Base layer: models, errors, logging, context store, persistence, retry, streaming."""

from .context import ContextStore
from .errors import ErrorCode, ReplError, classify_exception
from .interfaces import CompletionClient, LineReader, UserPrinter
from .models import ROLES, CompletionDelta, Message, Role, is_valid_role

__all__ = [
    "ContextStore",
    "ErrorCode",
    "ReplError",
    "classify_exception",
    "CompletionClient",
    "LineReader",
    "UserPrinter",
    "ROLES",
    "CompletionDelta",
    "Message",
    "Role",
    "is_valid_role",
]
