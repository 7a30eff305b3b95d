"""Offline scripted completion client."""

from .client import DEFAULT_MOCK_REPLY, ScriptedCompletionClient

__all__ = ["DEFAULT_MOCK_REPLY", "ScriptedCompletionClient"]
