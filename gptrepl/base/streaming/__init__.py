"""Streaming primitives: delta type, bounded stream channel and draining."""

from ..models import CompletionDelta
from .stream_channel import ChatStream, ChunkTranslator, DEFAULT_QUEUE_SIZE, start_stream
from .streaming import drain_stream

__all__ = [
    "CompletionDelta",
    "ChatStream",
    "ChunkTranslator",
    "DEFAULT_QUEUE_SIZE",
    "start_stream",
    "drain_stream",
]
