"""Conversation context store package."""

from .store import ContextStore, ChangeHook

__all__ = ["ContextStore", "ChangeHook"]
