"""Unified REPL error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``gptrepl.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode, NETWORK_CODES
from .errors_parts.repl_error import ReplError
from .errors_parts.classification import classify_exception

__all__ = ["ErrorCode", "NETWORK_CODES", "ReplError", "classify_exception"]
