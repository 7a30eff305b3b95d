"""Context persistence (JSON files validated with pydantic)."""

from .json_file import read_context_file, write_context_file
from .dto import MessageRecordDTO

__all__ = ["read_context_file", "write_context_file", "MessageRecordDTO"]
