"""Protocol parts (one class per file)."""

from .completion_client import CompletionClient
from .line_reader import LineReader
from .user_printer import UserPrinter

__all__ = ["CompletionClient", "LineReader", "UserPrinter"]
