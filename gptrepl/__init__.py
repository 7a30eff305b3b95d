"""gptrepl: a terminal chat REPL over an editable conversation context."""

from .base import CompletionDelta, ContextStore, ErrorCode, Message, ReplError

__version__ = "0.1.0"

__all__ = ["CompletionDelta", "ContextStore", "ErrorCode", "Message", "ReplError", "__version__"]
