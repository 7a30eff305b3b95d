"""
Collaborator interfaces (Protocols) for the session engine.

This module re-exports Protocols split into single-class modules under
``gptrepl.base.interfaces_parts`` so callers keep one stable import path.
"""

from __future__ import annotations

from .interfaces_parts import CompletionClient, LineReader, UserPrinter

__all__ = ["CompletionClient", "LineReader", "UserPrinter"]
