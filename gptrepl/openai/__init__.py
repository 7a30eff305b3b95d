"""OpenAI-backed completion client."""

from .client import OpenAICompletionClient, translate_chunk

__all__ = ["OpenAICompletionClient", "translate_chunk"]
